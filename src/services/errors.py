"""Domain errors raised by services and rendered by FastAPI."""

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, headers: dict[str, str] | None = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(ServiceError):
    """Missing or malformed input, or an upload over its size limit."""

    status_code = 422  # Unprocessable Content


class ConflictError(ServiceError):
    """Unique value already taken (email)."""

    status_code = status.HTTP_409_CONFLICT


class AuthError(ServiceError):
    """Bad credentials or an invalid/expired session token."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Invalid authentication credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(ServiceError):
    """Authenticated caller does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    """Unknown id."""

    status_code = status.HTTP_404_NOT_FOUND
