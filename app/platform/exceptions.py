from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request"


class AppException(Exception):
    """Base for errors that map onto a client-visible status and message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, errors: Optional[dict[str, list[str]]] = None):
        if message is not None:
            self.message = message
        self.errors = errors
        super().__init__(self.message)


class InputValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class StoreUnavailableError(AppException):
    message = GENERIC_ERROR_MESSAGE


def field_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Collapse pydantic error entries into a ``{field: [messages]}`` map."""
    result: dict[str, list[str]] = {}
    for error in errors:
        parts = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(parts) or "non_field_errors"
        msg = str(error.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        result.setdefault(field, []).append(msg)
    return result


def add_exception_handlers(app):
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        extra = {"errors": exc.errors} if exc.errors else {}
        return api_response(message=exc.message, status_code=exc.status_code, **extra)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=field_errors(exc.errors()),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Store failure on {request.method} {request.url.path}", exc_info=exc)
        return api_response(
            message=StoreUnavailableError.message,
            status_code=StoreUnavailableError.status_code,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}", exc_info=exc)
        return api_response(
            message=GENERIC_ERROR_MESSAGE,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
