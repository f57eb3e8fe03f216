"""Server-side upload validation and safe filename derivation."""

from upload_validator.models.upload_models import ErrorKind
from upload_validator.models.upload_models import TransportError
from upload_validator.models.upload_models import UploadDescriptor
from upload_validator.models.upload_models import UploadEnvironment
from upload_validator.models.upload_models import ValidationConfig
from upload_validator.models.upload_models import ValidationResult
from upload_validator.services.filename_normalizer import sanitize_filename
from upload_validator.services.pipeline import run_validation

__all__ = [
    "ErrorKind",
    "TransportError",
    "UploadDescriptor",
    "UploadEnvironment",
    "ValidationConfig",
    "ValidationResult",
    "run_validation",
    "sanitize_filename",
]
