"""
Model Vault Error Mapper

Maps framework exceptions to HTTP responses. Every ModelVaultError already
carries its status code; this module only decides the response body.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from model_vault.exceptions import (
    InvalidFileName,
    InvalidTransformParameter,
    ModelVaultError,
)
from model_vault.infrastructure.observability import get_api_logger

logger = get_api_logger("error-mapper")


def error_message(exc: ModelVaultError) -> str:
    if isinstance(exc, (InvalidFileName, InvalidTransformParameter)):
        return f"Invalid input: {exc.message}"
    return exc.message


def error_response(exc: ModelVaultError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": error_message(exc)},
    )


async def handle_model_vault_error(
    request: Request, exc: ModelVaultError
) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        method=request.method,
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=exc.message,
    )
    return error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ModelVaultError, handle_model_vault_error)
