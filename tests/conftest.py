import io
import logging

import pytest
from PIL import Image

from upload_validator.models.upload_models import UploadDescriptor
from upload_validator.models.upload_models import UploadEnvironment


@pytest.fixture
def make_image():
    """Returns a factory producing encoded images of the requested size."""

    def _make_image(width: int, height: int, fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make_image


@pytest.fixture
def environment():
    return UploadEnvironment(upload_max_filesize=2 * 1024 * 1024, post_max_size=8 * 1024 * 1024)


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


# Fixture factory to spool content to disk and describe it the way the runtime would
@pytest.fixture
def make_upload(tmp_path):
    spool = tmp_path / "spool"
    spool.mkdir()

    def _make_upload(filename: str, content: bytes, field_name: str = "userfile", content_type: str = "application/octet-stream", **overrides):
        tmp_file = spool / f"php{len(list(spool.iterdir()))}.tmp"
        tmp_file.write_bytes(content)
        values = {
            "field_name": field_name,
            "tmp_path": str(tmp_file),
            "filename": filename,
            "size": len(content),
            "content_type": content_type,
        }
        values.update(overrides)
        return {field_name: UploadDescriptor(**values)}

    return _make_upload


@pytest.fixture(autouse=True)
def _propagate_validator_logs():
    # setup_logging() detaches the package logger from root, where caplog listens
    logger = logging.getLogger("upload_validator")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous
