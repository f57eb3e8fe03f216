import asyncio
import json
import logging
from typing import Any
from uuid import uuid4

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import Request

from upload_validator.api.descriptors import discard_spooled_uploads
from upload_validator.api.descriptors import spool_uploads
from upload_validator.core.config import settings
from upload_validator.core.security import verify_api_key
from upload_validator.core.validation import FILE_TYPE_CATEGORIES
from upload_validator.models.upload_models import ValidationConfig
from upload_validator.services.error_rendering import ErrorFormat
from upload_validator.services.error_rendering import render_errors
from upload_validator.services.pipeline import run_validation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", dependencies=[Depends(verify_api_key)])

# Policy options that only the deployment may choose: the destination and how names are made safe for it
SERVER_ONLY_OPTIONS: frozenset[str] = frozenset(
    {
        "upload_dir",
        "file_permissions",
        "filename_prefix",
        "filename_sanitize",
        "filename_validate",
        "whitespace_replacement",
    }
)


def _reject_oversized_request(request: Request, request_id: str) -> None:
    """Refuses bodies larger than ``post_max_size`` before reading them."""
    declared = request.headers.get("content-length")
    limit = settings.environment().post_max_size
    if declared and declared.isdigit() and int(declared) > limit:
        logger.warning("[%s] Rejected request body of %s bytes (limit %d)", request_id, declared, limit)
        raise HTTPException(status_code=413, detail=f"Request body exceeds the {limit} byte limit.")


def _parse_config(raw: Any, request_id: str) -> ValidationConfig:
    """Builds the policy from the optional ``config`` form field (a JSON object)."""
    if raw is None or raw == "":
        return ValidationConfig()
    if not isinstance(raw, str):
        raise HTTPException(status_code=400, detail="The 'config' field must be a JSON object, not a file.")
    try:
        options = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Malformed 'config' JSON: {e.msg}") from e
    if not isinstance(options, dict):
        raise HTTPException(status_code=400, detail="The 'config' field must be a JSON object.")

    locked = sorted(SERVER_ONLY_OPTIONS.intersection(options))
    if locked:
        logger.warning("[%s] Client tried to set server-only options: %s", request_id, locked)
        raise HTTPException(status_code=400, detail=f"Options cannot be set by the client: {', '.join(locked)}")
    # pydantic.ValidationError propagates to the app-level 422 handler
    return ValidationConfig.model_validate(options)


@router.post(
    "/uploads/validate",
    summary="Validate an uploaded file and derive its destination filename",
    tags=["Uploads"],
)
async def validate_upload(
    request: Request,
    error_format: ErrorFormat = Query(ErrorFormat.RAW, alias="format"),
) -> dict[str, Any]:
    """
    Validates the file parts of a multipart request.

    Optional form fields: ``config`` (JSON policy, see ``ValidationConfig``) and
    ``MAX_FILE_SIZE`` (client size hint). The ``format`` query parameter selects
    how ``errors`` is rendered.
    """
    request_id = str(uuid4())
    _reject_oversized_request(request, request_id)

    form = await request.form()
    config = _parse_config(form.get("config"), request_id)
    hint = form.get("MAX_FILE_SIZE")
    client_max_file_size = hint if isinstance(hint, str) else None

    uploads = await spool_uploads(form, request_id, client_max_file_size)
    logger.info("[%s] Validation request for fields %s", request_id, list(uploads))
    try:
        result = await asyncio.to_thread(
            run_validation,
            uploads,
            config,
            client_max_file_size=client_max_file_size,
            request_id=request_id,
        )
    finally:
        discard_spooled_uploads(uploads)

    payload = result.to_payload()
    payload["errors"] = render_errors(result.errors, error_format)
    payload["valid"] = result.is_valid
    payload["request_id"] = request_id
    return payload


@router.get("/file-types", summary="List the known file-type categories", tags=["Uploads"])
def list_file_types() -> dict[str, list[str]]:
    return {category: list(extensions) for category, extensions in FILE_TYPE_CATEGORIES.items()}

