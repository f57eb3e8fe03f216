import logging

from upload_validator.core.logging import setup_logging


def test_setup_logging_level_reaches_submodule_loggers():
    try:
        setup_logging("warning")
        assert logging.getLogger("upload_validator").level == logging.WARNING
        assert logging.getLogger("upload_validator.services.pipeline").getEffectiveLevel() == logging.WARNING
        assert logging.getLogger("upload_validator.api.routes").getEffectiveLevel() == logging.WARNING
    finally:
        setup_logging()
