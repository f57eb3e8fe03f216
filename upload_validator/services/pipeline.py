"""Validation pipeline for a single uploaded file.

The pipeline runs a fixed sequence of checks over one ``UploadDescriptor``:

1. pick the upload to validate and route transport failures to classification,
2. extract the extension and check it against the allowed types,
3. check the declared size against the effective ceiling,
4. probe image dimensions and check them against the policy bounds,
5. build a sanitised, length-bounded, collision-free filename and validate it,
6. optionally move the file to its destination.

Every check that applies is run and every failure is recorded on the
``ValidationResult``; nothing here stops at the first error. Configuration and
usage mistakes are raised instead (see ``upload_validator.core.exceptions``).
"""

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from upload_validator.core.exceptions import ConfigurationError
from upload_validator.core.exceptions import UploadFieldNotFoundError
from upload_validator.core.exceptions import UploadInputError
from upload_validator.core.validation import IMAGE_EXTENSIONS
from upload_validator.core.validation import VALID_FILENAME_PATTERN
from upload_validator.models.upload_models import ErrorKind
from upload_validator.models.upload_models import TransportError
from upload_validator.models.upload_models import UploadDescriptor
from upload_validator.models.upload_models import UploadEnvironment
from upload_validator.models.upload_models import ValidationConfig
from upload_validator.models.upload_models import ValidationResult
from upload_validator.services.collision_resolver import ExistsFn
from upload_validator.services.collision_resolver import ci_file_exists
from upload_validator.services.collision_resolver import resolve_collision
from upload_validator.services.error_catalog import ErrorCatalog
from upload_validator.services.filename_normalizer import slugify
from upload_validator.services.image_probe import read_image_dimensions
from upload_validator.services.limits import effective_max_file_size
from upload_validator.services.storage import move_upload

__all__ = [
    "UploadValidationPipeline",
    "run_validation",
]

logger = logging.getLogger(__name__)

_PATH_SEPARATORS = re.compile(r"[\\/]")

_TRANSPORT_ERRORS: dict[int, ErrorKind] = {
    TransportError.SIZE_EXCEEDED_BY_SERVER: ErrorKind.FILE_SIZE_TOO_LARGE,
    TransportError.SIZE_EXCEEDED_BY_FORM: ErrorKind.FILE_SIZE_TOO_LARGE,
    TransportError.PARTIAL: ErrorKind.FILE_UPLOAD_PARTIAL,
    TransportError.NONE_SUBMITTED: ErrorKind.NO_FILE_UPLOADED,
    TransportError.MISSING_TEMP_DIR: ErrorKind.MISSING_TEMPORARY_FOLDER,
    TransportError.WRITE_FAILED: ErrorKind.FAILED_WRITE_TO_DISK,
}


def extract_extension(filename: str) -> str:
    """Returns the lowercased text after the last period of ``filename``.

    Raises:
        UploadInputError: If the name contains no period at all.
    """
    segments = filename.split(".")
    if len(segments) < 2:
        raise UploadInputError(f"Unable to establish a file type/extension for '{filename}'")
    return segments[-1].lower()


def strip_path_and_extension(filename: str, extension: str) -> str:
    """Drops directory components and a trailing ``.extension`` (case-insensitive)."""
    name = _PATH_SEPARATORS.split(filename)[-1]
    suffix = f".{extension}"
    if name.lower().endswith(suffix) and len(name) > len(suffix):
        name = name[: -len(suffix)]
    return name


def resolve_upload_dir(upload_dir: str) -> str:
    """Returns ``upload_dir`` as an absolute path ending with a separator.

    Raises:
        ConfigurationError: If the path is not an existing directory.
    """
    path = Path(upload_dir or ".").resolve()
    if not path.is_dir():
        raise ConfigurationError(f"Invalid upload directory '{upload_dir}': the path is not an existing directory")
    return str(path).rstrip(os.sep) + os.sep


class UploadValidationPipeline:
    """Validates one upload against a ``ValidationConfig``.

    Args:
        environment: Runtime size ceilings. Defaults to ``settings.environment()``.
        exists: Existence predicate used for collision probing.
    """

    def __init__(self, environment: UploadEnvironment | None = None, exists: ExistsFn = ci_file_exists) -> None:
        if environment is None:
            # Local import so tests can build pipelines without touching process settings
            from upload_validator.core.config import settings

            environment = settings.environment()
        self.environment = environment
        self.exists = exists

    def run(
        self,
        uploads: Mapping[str, UploadDescriptor],
        config: ValidationConfig | None = None,
        client_max_file_size: str | int | None = None,
        request_id: str = "-",
    ) -> ValidationResult:
        """Runs every applicable check and returns the populated result.

        Args:
            uploads: Submitted files keyed by form field name.
            config: Validation policy. Defaults to ``ValidationConfig()``.
            client_max_file_size: The ``MAX_FILE_SIZE`` value sent with the request, if any.
            request_id: Identifier used to correlate log lines.

        Raises:
            UploadFieldNotFoundError: If ``config.field_name`` is not among ``uploads``.
            UploadInputError: If the upload has no extension or its temporary file is gone.
            ConfigurationError: If the upload directory does not exist.
        """
        config = config or ValidationConfig()
        catalog = ErrorCatalog(config.locale, config.field_label)
        result = ValidationResult()
        result.bind_catalog(catalog)

        field_name = config.field_name
        if not field_name:
            if not uploads:
                logger.warning("[%s] There are no uploads to validate.", request_id)
                return result
            field_name = next(iter(uploads))
            logger.debug("[%s] No field name configured, validating '%s'", request_id, field_name)
        elif field_name not in uploads:
            logger.error("[%s] Field '%s' not found among uploads %s", request_id, field_name, list(uploads))
            raise UploadFieldNotFoundError(f"A field name was provided but cannot be found among the uploads: '{field_name}'")

        upload = uploads[field_name]
        result.field_name = field_name
        result.upload_exists = bool(upload.tmp_path)
        result.max_file_size = effective_max_file_size(self.environment, config.max_file_size, client_max_file_size)

        if upload.error == TransportError.NONE and result.upload_exists:
            self._validate_content(upload, config, result, request_id)
        else:
            self._classify_transport_error(upload, config, result, request_id)

        logger.info(
            "[%s] Validation of '%s' finished with %d error(s): %s",
            request_id,
            field_name,
            len(result.error_kinds),
            [kind.value for kind in result.error_kinds],
        )
        return result

    # ------------------------------------------------------------------
    # Content checks
    # ------------------------------------------------------------------

    def _validate_content(
        self,
        upload: UploadDescriptor,
        config: ValidationConfig,
        result: ValidationResult,
        request_id: str,
    ) -> None:
        if not os.path.isfile(upload.tmp_path):
            logger.error("[%s] Temporary file %s not found", request_id, upload.tmp_path)
            raise UploadInputError("The file could not be found on the server.")

        result.mime_type = upload.content_type
        result.file_extension = extract_extension(upload.filename)

        allowed = config.allowed_extensions
        if result.file_extension not in allowed:
            logger.warning("[%s] Rejected extension '%s' for %s", request_id, result.file_extension, upload.filename)
            result.add_error(ErrorKind.INVALID_FILE_EXTENSION, allowed_types=allowed)

        self._check_size(upload, result, request_id)
        if not result.has_error(ErrorKind.FILE_SIZE_ZERO):
            self._check_dimensions(upload, config, result, request_id)

        self._build_filename(upload, config, result, request_id)
        if config.filename_validate:
            self._validate_filename(config, result)

        if config.move_file and result.is_valid:
            self._relocate(upload, config, result, request_id)

    def _check_size(self, upload: UploadDescriptor, result: ValidationResult, request_id: str) -> None:
        max_size = result.max_file_size or 0
        if upload.size > max_size:
            logger.warning("[%s] Rejected upload exceeding size limit: %d > %d bytes", request_id, upload.size, max_size)
            result.add_error(ErrorKind.FILE_UPLOAD_SIZE_TOO_LARGE, max_size=max_size, file_size=upload.size)
        elif upload.size < 1:
            logger.warning("[%s] Rejected empty upload: %s", request_id, upload.filename)
            result.add_error(ErrorKind.FILE_SIZE_ZERO)

    def _check_dimensions(
        self,
        upload: UploadDescriptor,
        config: ValidationConfig,
        result: ValidationResult,
        request_id: str,
    ) -> None:
        dimensions = read_image_dimensions(upload.tmp_path)
        if dimensions is None:
            if result.file_extension in IMAGE_EXTENSIONS:
                logger.warning("[%s] Could not read dimensions of image %s", request_id, upload.filename)
                result.add_error(ErrorKind.INVALID_IMAGE_DIMENSIONS)
            return

        width, height = dimensions
        result.is_image_upload = True
        result.img_width = width
        result.img_height = height
        logger.debug("[%s] Image dimensions: %dx%d", request_id, width, height)

        if not (config.min_img_width <= width <= config.max_img_width and config.min_img_height <= height <= config.max_img_height):
            result.add_error(
                ErrorKind.IMAGE_DIMENSIONS_OUT_OF_BOUNDS,
                min_width=config.min_img_width,
                max_width=config.max_img_width,
                min_height=config.min_img_height,
                max_height=config.max_img_height,
                img_width=width,
                img_height=height,
            )

    # ------------------------------------------------------------------
    # Filename
    # ------------------------------------------------------------------

    def _build_filename(
        self,
        upload: UploadDescriptor,
        config: ValidationConfig,
        result: ValidationResult,
        request_id: str,
    ) -> None:
        extension = result.file_extension
        result.upload_dir = resolve_upload_dir(config.upload_dir)

        if config.filename:
            result.filename_raw = f"{config.filename}.{extension}"
        else:
            result.filename_raw = upload.filename

        base = config.filename_prefix + strip_path_and_extension(result.filename_raw, extension)
        if config.filename_sanitize:
            base = slugify(base, config.whitespace_replacement)

        if result.is_image_upload and config.filename_img_dimensions:
            result.filename_img_modifier = f"-{result.img_width}x{result.img_height}"

        budget = config.filename_max_length - len(result.filename_img_modifier) - 1 - len(extension)
        base = base[: max(budget, 0)]

        base, counter = resolve_collision(
            result.upload_dir,
            base,
            result.filename_img_modifier,
            extension,
            config.filename_max_length,
            overwrite=config.overwrite,
            exists=self.exists,
        )

        result.filename_base = base
        result.filename_count_modifier = counter
        result.filename = f"{base}{counter}{result.filename_img_modifier}"
        result.filename_full = f"{result.filename}.{extension}"
        logger.debug("[%s] Destination filename: %s%s", request_id, result.upload_dir, result.filename_full)

    @staticmethod
    def _validate_filename(config: ValidationConfig, result: ValidationResult) -> None:
        base = result.filename_base
        if not VALID_FILENAME_PATTERN.fullmatch(base) or ".." in base:
            result.add_error(ErrorKind.INVALID_FILENAME)

        filename_length = len(result.filename_full)
        if filename_length > config.filename_max_length:
            result.add_error(
                ErrorKind.FILENAME_TOO_LONG,
                max_length=config.filename_max_length,
                filename_length=filename_length,
            )

    # ------------------------------------------------------------------
    # Transport errors and relocation
    # ------------------------------------------------------------------

    @staticmethod
    def _classify_transport_error(
        upload: UploadDescriptor,
        config: ValidationConfig,
        result: ValidationResult,
        request_id: str,
    ) -> None:
        kind = _TRANSPORT_ERRORS.get(upload.error, ErrorKind.UNKNOWN_ERROR)
        logger.info("[%s] Upload '%s' arrived with transport code %d", request_id, upload.field_name, upload.error)

        if kind is ErrorKind.NO_FILE_UPLOADED and not config.upload_is_required:
            return
        if kind is ErrorKind.FILE_SIZE_TOO_LARGE:
            result.add_error(kind, max_size=result.max_file_size)
        elif kind is ErrorKind.UNKNOWN_ERROR:
            result.add_error(kind, code=upload.error)
        else:
            result.add_error(kind)

    @staticmethod
    def _relocate(
        upload: UploadDescriptor,
        config: ValidationConfig,
        result: ValidationResult,
        request_id: str,
    ) -> None:
        destination = f"{result.upload_dir}{result.filename_full}"
        if Path(destination).resolve().parent != Path(result.upload_dir):
            logger.warning("[%s] Refused to store %s outside %s", request_id, destination, result.upload_dir)
            result.add_error(ErrorKind.MOVE_UPLOADED_FILE_FAILED)
            return
        if move_upload(upload.tmp_path, destination, config.file_permissions):
            logger.info("[%s] Stored upload as %s", request_id, destination)
        else:
            result.add_error(ErrorKind.MOVE_UPLOADED_FILE_FAILED)


def run_validation(
    uploads: Mapping[str, UploadDescriptor],
    config: ValidationConfig | None = None,
    *,
    environment: UploadEnvironment | None = None,
    client_max_file_size: str | int | None = None,
    request_id: str = "-",
    exists: ExistsFn = ci_file_exists,
) -> ValidationResult:
    """Validates one upload; see ``UploadValidationPipeline.run``."""
    pipeline = UploadValidationPipeline(environment=environment, exists=exists)
    return pipeline.run(uploads, config, client_max_file_size=client_max_file_size, request_id=request_id)
