"""Provides API key-based protection for the validation endpoints."""

import logging

from fastapi import Depends
from fastapi import HTTPException
from fastapi.security import APIKeyHeader

from upload_validator.core.config import settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header can be accepted when no key is configured
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(key: str | None = Depends(api_key_header)) -> bool:
    """Checks the X-API-Key header against the configured key.

    When ``settings.api_key`` is unset the endpoints are open; every call logs a
    warning so an unprotected deployment does not go unnoticed.

    Raises:
        HTTPException: 403 if a key is configured and the header does not match it.
    """
    if not settings.api_key:
        logger.warning("No API_KEY configured: validation endpoints are accepting unauthenticated requests.")
        return True

    if key != settings.api_key:
        raise HTTPException(status_code=403, detail="Invalid API Key")
    return True
