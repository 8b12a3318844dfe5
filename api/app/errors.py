"""Application error taxonomy.

Repositories and storage backends translate lower-layer failures into these
types; ``app.main`` renders them as JSON responses with the matching status.
"""

from typing import Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record already exists"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid authentication token"


class InvalidFieldError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Field cannot be changed"


class StorageIOError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Media storage operation failed"


class OperationTimeoutError(AppError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Operation timed out"


class InternalError(AppError):
    pass
