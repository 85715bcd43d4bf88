# backend/utils/error_handler.py
import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import CustomAPIError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Something went wrong try again later"

# "UNIQUE constraint failed: users.email" (SQLite) / "Key (email)=(...)" (PostgreSQL)
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<cols>[\w., ]+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((?P<cols>[\w, ]+)\)=")


def _error_response(status_code: int, msg: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"statusCode": status_code, "msg": msg})


def duplicate_fields(exc: IntegrityError):
    """Return the column names behind a unique-constraint violation, or None."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    match = _SQLITE_UNIQUE.search(text)
    if match:
        return [c.strip().split(".")[-1] for c in match.group("cols").split(",")]
    match = _POSTGRES_UNIQUE.search(text)
    if match:
        return [c.strip() for c in match.group("cols").split(",")]
    return None


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(CustomAPIError)
    async def handle_custom_error(request: Request, exc: CustomAPIError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        # Malformed identifiers in the path behave like a missing resource
        for err in errors:
            if err.get("loc") and err["loc"][0] == "path":
                return _error_response(status.HTTP_404_NOT_FOUND, f"No item found with id : {err.get('input')}")

        messages = []
        for err in errors:
            field = err["loc"][-1] if err.get("loc") else None
            msg = err.get("msg", "Invalid value")
            messages.append(f"{field}: {msg}" if field not in (None, "body") else msg)
        return _error_response(status.HTTP_400_BAD_REQUEST, ",".join(messages))

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        fields = duplicate_fields(exc)
        if fields:
            return _error_response(
                status.HTTP_400_BAD_REQUEST,
                f"Duplicate value entered for {', '.join(fields)} field, please choose another value",
            )
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid value provided")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return _error_response(exc.status_code, "Route does not exist")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, DEFAULT_MESSAGE)
