"""Turns multipart form parts into ``UploadDescriptor`` objects.

This is the runtime side of validation: each file part is spooled to a
temporary file and given the transport code an upload runtime would report
(nothing submitted, over the server limit, over the form's ``MAX_FILE_SIZE``,
missing temporary directory, write failure).
"""

import logging
import os
import tempfile

from starlette.datastructures import FormData
from starlette.datastructures import UploadFile

from upload_validator.core.config import settings
from upload_validator.models.upload_models import TransportError
from upload_validator.models.upload_models import UploadDescriptor

__all__ = [
    "discard_spooled_uploads",
    "spool_upload",
    "spool_uploads",
]

logger = logging.getLogger(__name__)

CHUNK_SIZE: int = 64 * 1024


def _form_limit(client_max_file_size: str | None) -> int | None:
    if client_max_file_size and client_max_file_size.isascii() and client_max_file_size.isdigit():
        return int(client_max_file_size)
    return None


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


async def spool_upload(
    field_name: str,
    upload: UploadFile,
    request_id: str,
    client_max_file_size: str | None = None,
) -> UploadDescriptor:
    """Copies one uploaded part to a temporary file and describes it."""
    filename = upload.filename or ""
    content_type = upload.content_type or ""
    server_limit = settings.environment().upload_max_filesize
    form_limit = _form_limit(client_max_file_size)
    tmp_dir = str(settings.upload_tmp_dir) if settings.upload_tmp_dir else None

    def _describe(error: TransportError, tmp_path: str = "", size: int = 0) -> UploadDescriptor:
        return UploadDescriptor(
            field_name=field_name,
            tmp_path=tmp_path,
            filename=filename,
            size=size,
            content_type=content_type,
            error=error,
        )

    try:
        handle = tempfile.NamedTemporaryFile(prefix="upload-", dir=tmp_dir, delete=False)
    except FileNotFoundError:
        logger.error("[%s] Temporary upload directory %s is missing", request_id, tmp_dir)
        return _describe(TransportError.MISSING_TEMP_DIR)
    except OSError as e:
        logger.error("[%s] Could not create a temporary file for '%s': %s", request_id, field_name, e)
        return _describe(TransportError.WRITE_FAILED)

    size = 0
    error = TransportError.NONE
    try:
        with handle:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > server_limit:
                    error = TransportError.SIZE_EXCEEDED_BY_SERVER
                    break
                if form_limit is not None and size > form_limit:
                    error = TransportError.SIZE_EXCEEDED_BY_FORM
                    break
                handle.write(chunk)
    except OSError as e:
        logger.error("[%s] Failed writing upload '%s' to disk: %s", request_id, filename, e)
        _discard(handle.name)
        return _describe(TransportError.WRITE_FAILED)
    except BaseException:
        # Client disconnects and cancellation must not leave the spooled file behind
        _discard(handle.name)
        raise

    if error is not TransportError.NONE:
        logger.warning("[%s] Upload '%s' exceeded the size limit (code %d)", request_id, filename, error)
        _discard(handle.name)
        return _describe(error)

    if not filename and size == 0:
        _discard(handle.name)
        return _describe(TransportError.NONE_SUBMITTED)

    logger.debug("[%s] Spooled '%s' (%d bytes) to %s", request_id, filename, size, handle.name)
    return _describe(TransportError.NONE, tmp_path=handle.name, size=size)


async def spool_uploads(
    form: FormData,
    request_id: str,
    client_max_file_size: str | None = None,
) -> dict[str, UploadDescriptor]:
    """Spools every file part of ``form``, keyed by field name in submission order.

    Only the first file of a repeated field is kept; batches are not validated.
    """
    descriptors: dict[str, UploadDescriptor] = {}
    for field_name, value in form.multi_items():
        if not isinstance(value, UploadFile) or field_name in descriptors:
            continue
        descriptors[field_name] = await spool_upload(field_name, value, request_id, client_max_file_size)
    return descriptors


def discard_spooled_uploads(descriptors: dict[str, UploadDescriptor]) -> None:
    """Deletes spooled files that validation did not move elsewhere."""
    for descriptor in descriptors.values():
        if descriptor.tmp_path:
            _discard(descriptor.tmp_path)
