import sys
from logging.config import dictConfig

from upload_validator.core.config import settings

# Uvicorn-compatible logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(asctime)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(asctime)s [%(name)s] "%(request_line)s" %(status_code)s',
        },
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stderr,
            "level": "INFO",
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": sys.stdout,
            "level": "INFO",
        },
        # Validator logs go to stdout so per-request traces stay together
        "validator": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": sys.stdout,
            "level": "DEBUG",
        },
    },
    "loggers": {
        "root": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        # Submodule loggers inherit level and handler from the package logger
        "upload_validator": {"handlers": ["validator"], "level": "DEBUG", "propagate": False},
    },
}


def setup_logging(level: str | None = None) -> None:
    """Configures application-wide logging using dictConfig.

    Args:
        level: Overrides the level of the ``upload_validator`` loggers. Defaults to ``settings.log_level``.
    """
    LOGGING_CONFIG["loggers"]["upload_validator"]["level"] = (level or settings.log_level).upper()  # type: ignore[index]
    dictConfig(LOGGING_CONFIG)
