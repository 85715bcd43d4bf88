# backend/utils/errors.py
from fastapi import status


class CustomAPIError(Exception):
    """Base class for errors converted to ``{"statusCode", "msg"}`` responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(CustomAPIError):
    """Malformed or missing input (400)."""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(CustomAPIError):
    """Identity not established, or credentials/tokens are invalid (401)."""
    status_code = status.HTTP_401_UNAUTHORIZED


class UnauthorizedError(CustomAPIError):
    """Identity established but lacking the rights for the resource (403)."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(CustomAPIError):
    """Requested resource does not exist (404)."""
    status_code = status.HTTP_404_NOT_FOUND
