"""
API error types.

Every error leaves the API as ``{"error": <message>}``; subclasses may attach
extra top-level keys (the booking conflict summary, for instance).
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base class carrying an HTTP status and optional extra body fields."""

    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.status_code_default, detail=detail, headers=headers)
        self.extra = extra or {}


class BadRequest(ApiError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class ValidationFailed(ApiError):
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotAuthenticated(ApiError):
    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Unauthorized", **kwargs):
        super().__init__(detail, **kwargs)


class Forbidden(ApiError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Forbidden", **kwargs):
        super().__init__(detail, **kwargs)


class NotFound(ApiError):
    status_code_default = status.HTTP_404_NOT_FOUND


class Conflict(ApiError):
    status_code_default = status.HTTP_409_CONFLICT


def error_body(exc: HTTPException) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": exc.detail if isinstance(exc.detail, str) else str(exc.detail)}
    body.update(getattr(exc, "extra", {}) or {})
    return body
