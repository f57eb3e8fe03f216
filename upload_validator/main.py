import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from upload_validator.api.routes import router
from upload_validator.core.config import settings
from upload_validator.core.exceptions import ConfigurationError
from upload_validator.core.exceptions import UploadFieldNotFoundError
from upload_validator.core.exceptions import UploadInputError
from upload_validator.core.logging import setup_logging

setup_logging()

app = FastAPI(title="Upload Validator")

logger = logging.getLogger(__name__)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.error(f"HTTP exception: {exc.detail} (status: {exc.status_code})")
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("Request validation failed: %s", exc.errors(), exc_info=False)
    return JSONResponse(
        {"error": "Input validation failed", "details": exc.errors()},
        status_code=422,
    )


@app.exception_handler(ValidationError)
async def policy_validation_exception_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    logger.error("Invalid validation policy: %s", exc.errors(include_url=False), exc_info=False)
    return JSONResponse(
        {"error": "Invalid validation config", "details": exc.errors(include_url=False, include_context=False)},
        status_code=422,
    )


@app.exception_handler(UploadFieldNotFoundError)
async def field_not_found_exception_handler(_request: Request, exc: UploadFieldNotFoundError) -> JSONResponse:
    logger.error(f"Upload field error: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(UploadInputError)
async def upload_input_exception_handler(_request: Request, exc: UploadInputError) -> JSONResponse:
    logger.error(f"Upload input error: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.critical(f"Configuration error: {str(exc)}")
    return JSONResponse({"error": "The upload validator is misconfigured."}, status_code=500)


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"])
async def health_check() -> dict[str, str]:
    logger.info("Health check endpoint called")
    return {"status": "ok"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)
app.include_router(router)
