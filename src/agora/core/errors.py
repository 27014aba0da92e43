"""Error taxonomy shared by every service.

Services raise these instead of ``HTTPException``; the application maps each
kind to its HTTP status in one place (see ``agora.main``).
"""

from __future__ import annotations

from fastapi import status


class AppError(RuntimeError):
    """Base exception for failures reported back to the caller.

    Each subclass carries the HTTP status the API layer responds with.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BadRequestError(AppError):
    """Raised for malformed input or a self-referential action."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """Raised for a missing/invalid credential or an access-control denial."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Raised on uniqueness or state-machine violations."""

    status_code = status.HTTP_409_CONFLICT


class ServiceUnavailableError(AppError):
    """Raised when storage, redis or the object store cannot be reached.

    Callers may retry the whole operation.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
