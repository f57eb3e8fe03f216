"""Data model for one validation run: the upload, the policy and the outcome."""

from __future__ import annotations

from enum import Enum
from enum import IntEnum
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PrivateAttr
from pydantic import field_validator
from pydantic import model_validator

from upload_validator.core.validation import FILE_TYPE_CATEGORIES
from upload_validator.core.validation import MIN_FILENAME_MAX_LENGTH
from upload_validator.core.validation import all_known_extensions


class TransportError(IntEnum):
    """Outcome of the upload transfer as reported by the runtime."""

    NONE = 0
    SIZE_EXCEEDED_BY_SERVER = 1
    SIZE_EXCEEDED_BY_FORM = 2
    PARTIAL = 3
    NONE_SUBMITTED = 4
    MISSING_TEMP_DIR = 6
    WRITE_FAILED = 7
    OTHER = 8


class ErrorKind(str, Enum):
    """Validation failures that can be recorded on a result, in no particular order."""

    INVALID_FILE_EXTENSION = "INVALID_FILE_EXTENSION"
    FILE_UPLOAD_SIZE_TOO_LARGE = "FILE_UPLOAD_SIZE_TOO_LARGE"
    FILE_SIZE_TOO_LARGE = "FILE_SIZE_TOO_LARGE"
    FILE_SIZE_ZERO = "FILE_SIZE_ZERO"
    INVALID_IMAGE_DIMENSIONS = "INVALID_IMAGE_DIMENSIONS"
    IMAGE_DIMENSIONS_OUT_OF_BOUNDS = "IMAGE_DIMENSIONS_OOB"
    INVALID_FILENAME = "INVALID_FILENAME"
    FILENAME_TOO_LONG = "FILENAME_TOO_LONG"
    MOVE_UPLOADED_FILE_FAILED = "MOVE_UPLOADED_FILE_FAILED"
    FILE_UPLOAD_PARTIAL = "FILE_UPLOAD_PARTIAL"
    NO_FILE_UPLOADED = "NO_FILE_UPLOADED"
    MISSING_TEMPORARY_FOLDER = "MISSING_TEMPORARY_FOLDER"
    FAILED_WRITE_TO_DISK = "FAILED_WRITE_TO_DISK"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class UploadDescriptor(BaseModel):
    """One submitted file as handed over by the runtime. Read-only."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    tmp_path: str = ""
    filename: str = ""
    size: int = 0
    content_type: str = ""
    # Kept as a plain int: codes outside TransportError classify as unknown
    error: int = TransportError.NONE


class UploadEnvironment(BaseModel):
    """Size ceilings imposed by the runtime, in bytes."""

    model_config = ConfigDict(frozen=True)

    upload_max_filesize: int
    post_max_size: int


def _default_upload_dir() -> str:
    # Local import to avoid a cycle: config builds UploadEnvironment from this module
    from upload_validator.core.config import settings

    return str(settings.default_upload_dir)


def _default_locale() -> str:
    from upload_validator.core.config import settings

    return settings.default_locale


class ValidationConfig(BaseModel):
    """Per-upload policy merged over the documented defaults.

    The model is frozen; invariants are applied once when it is built:
    ``filename_max_length`` is raised to at least 20, inverted image bounds are
    swapped and ``allowed_file_types`` is normalised to lowercase extensions or
    a known category name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    field_name: str = ""
    field_label: str = ""
    locale: str = Field(default_factory=_default_locale)

    allowed_file_types: list[str] | str = Field(default_factory=list)
    max_file_size: int = 128000
    upload_is_required: bool = False

    min_img_width: int = 1
    min_img_height: int = 1
    max_img_width: int = 5000
    max_img_height: int = 5000

    move_file: bool = False
    overwrite: bool = False
    upload_dir: str = Field(default_factory=_default_upload_dir)

    file_permissions: int = 0o775
    filename: str = ""
    filename_img_dimensions: bool = False
    filename_max_length: int = 150
    filename_prefix: str = ""
    filename_sanitize: bool = True
    filename_validate: bool = True
    whitespace_replacement: str = "-"

    @model_validator(mode="before")
    @classmethod
    def order_image_bounds(cls, data: Any) -> Any:
        """Swaps min/max image bounds given in the wrong order."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for low, high in (("min_img_width", "max_img_width"), ("min_img_height", "max_img_height")):
            try:
                low_value = int(data.get(low, cls.model_fields[low].default))
                high_value = int(data.get(high, cls.model_fields[high].default))
            except (TypeError, ValueError):
                # Left to field validation to report
                continue
            if low_value > high_value:
                data[low], data[high] = high_value, low_value
        return data

    @field_validator("filename_max_length")
    @classmethod
    def clamp_filename_max_length(cls, v: int) -> int:
        return max(v, MIN_FILENAME_MAX_LENGTH)

    @field_validator("allowed_file_types")
    @classmethod
    def normalise_allowed_types(cls, v: list[str] | str) -> list[str] | str:
        if isinstance(v, str):
            if v not in FILE_TYPE_CATEGORIES:
                raise ValueError(f"File validation for type '{v}' not supported")
            return v
        return [ext.strip().lstrip(".").lower() for ext in v if ext.strip()]

    @property
    def allowed_extensions(self) -> list[str]:
        """The allowed extensions after category expansion."""
        if isinstance(self.allowed_file_types, str):
            return list(FILE_TYPE_CATEGORIES[self.allowed_file_types])
        if not self.allowed_file_types:
            return all_known_extensions()
        return list(self.allowed_file_types)


class ValidationResult(BaseModel):
    """Outcome of one validation run.

    Errors are stored as kinds with their parameters and rendered through the
    run's catalog when read, so the message text never depends on check order.
    """

    field_name: str = ""
    file_extension: str = ""
    filename_raw: str = ""
    filename_base: str = ""
    filename_img_modifier: str = ""
    filename_count_modifier: str = ""
    filename: str = ""
    filename_full: str = ""
    mime_type: str = ""
    img_width: int | None = None
    img_height: int | None = None
    max_file_size: int | None = None
    upload_dir: str = ""
    is_image_upload: bool = False
    upload_exists: bool = False

    _issues: dict[ErrorKind, dict[str, Any]] = PrivateAttr(default_factory=dict)
    _catalog: Any = PrivateAttr(default=None)

    def bind_catalog(self, catalog: Any) -> None:
        self._catalog = catalog

    def add_error(self, kind: ErrorKind, **params: Any) -> bool:
        """Records ``kind`` unless already present. Returns whether it was added."""
        if kind in self._issues:
            return False
        self._issues[kind] = params
        return True

    def has_error(self, kind: ErrorKind) -> bool:
        return kind in self._issues

    @property
    def error_kinds(self) -> list[ErrorKind]:
        return list(self._issues)

    @property
    def errors(self) -> dict[ErrorKind, str]:
        """Rendered messages keyed by kind, in the order the checks recorded them."""
        if not self._issues:
            return {}
        if self._catalog is None:
            # Local import: the catalog module depends on this one
            from upload_validator.services.error_catalog import ErrorCatalog

            self._catalog = ErrorCatalog()
        return {kind: self._catalog.render(kind, **params) for kind, params in self._issues.items()}

    @property
    def is_valid(self) -> bool:
        return not self._issues

    def to_payload(self) -> dict[str, Any]:
        """Plain-data view of the result, errors included, keyed by the error kind values."""
        payload = self.model_dump()
        payload["errors"] = {kind.value: message for kind, message in self.errors.items()}
        return payload
