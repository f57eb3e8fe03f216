import logging

import pytest
from fastapi import HTTPException

from upload_validator.core.config import settings
from upload_validator.core.security import verify_api_key


@pytest.mark.asyncio
async def test_verify_api_key_success(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret", raising=False)
    result = await verify_api_key("secret")
    assert result is True


@pytest.mark.asyncio
async def test_verify_api_key_failure(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret", raising=False)
    with pytest.raises(HTTPException) as exc:
        await verify_api_key("wrong_key")
    assert exc.value.status_code == 403
    assert exc.value.detail == "Invalid API Key"


@pytest.mark.asyncio
async def test_missing_header_is_rejected_when_key_configured(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "secret", raising=False)
    with pytest.raises(HTTPException):
        await verify_api_key(None)


@pytest.mark.asyncio
async def test_open_when_no_key_configured(monkeypatch, caplog):
    monkeypatch.setattr(settings, "api_key", None, raising=False)
    with caplog.at_level(logging.WARNING, logger="upload_validator"):
        assert await verify_api_key(None) is True
    assert "No API_KEY configured" in caplog.text
