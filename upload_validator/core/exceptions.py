"""Core custom exceptions for the upload validator."""


class UploadValidatorError(Exception):
    """Base exception for errors that abort a validation run."""


class ConfigurationError(UploadValidatorError):
    """Exception for deployment or usage mistakes (e.g., missing upload directory, incomplete message catalog)."""


class UploadFieldNotFoundError(ConfigurationError):
    """Raised when the configured field name is not among the submitted uploads."""


class UploadInputError(UploadValidatorError):
    """Raised when an upload cannot be examined at all (no extension, temporary file gone)."""
