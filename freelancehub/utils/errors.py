"""Domain error taxonomy and standardized error payloads."""
from typing import Any

from fastapi import HTTPException, status


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class DomainError(HTTPException):
    """Base class for terminal engine errors surfaced to the API layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.code = code or self.default_code
        self.message = message
        super().__init__(
            status_code=self.status_code,
            detail=error_response(self.code, message, details),
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class InvalidState(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "INVALID_STATE"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class InvalidArgument(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_ARGUMENT"


class InsufficientFunds(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "INSUFFICIENT_FUNDS"


__all__ = [
    "error_response",
    "DomainError",
    "NotFound",
    "Forbidden",
    "InvalidState",
    "Conflict",
    "InvalidArgument",
    "InsufficientFunds",
]
