# app/shared/errors.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.shared.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for every failure a handler turns into an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

class InvalidFilename(BadRequest):
    pass

class InvalidUsername(BadRequest):
    pass

class UploadTooLarge(BadRequest):
    pass


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

class InvalidCredentials(Unauthorized):
    pass

class InvalidOrExpired(Unauthorized):
    pass


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT

class DuplicateUsername(Conflict):
    pass


class InternalFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

class StorageFailure(InternalFailure):
    pass


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for e in exc.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {e.get('msg')}" if loc else str(e.get("msg")))
    return "invalid request: " + "; ".join(parts)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(_describe_validation(exc), status.HTTP_400_BAD_REQUEST)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    # DEV-ONLY: echo the real error so it shows up in Swagger
    message = str(exc) if settings.ENV == "dev" else "internal error"
    return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
