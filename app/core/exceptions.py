# app/core/exceptions.py
from __future__ import annotations

"""
KinoAdmin — Application Exceptions
==================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the JSON error
shape from `app.core.exception_handlers`.

Key ideas
---------
- One base `AppException` that carries `code`, `request_id`, `user_id`, `details`.
- The admin domain raises exactly four kinds:
    `Unauthenticated` (401), `Forbidden` (403), `InvalidInput` (400), `NotFound` (404).
- Helpers to render a canonical body (`to_problem`) compatible with our handlers.
- Callers already catching `HTTPException` keep working.

Usage
-----
    raise NotFound("Movie not found", details={"movie_id": str(movie_id)})
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "Unauthenticated",
    "Forbidden",
    "InvalidInput",
    "NotFound",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (e.g., 400/401/403/404).
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    request_id : str | None
        Optional request correlation id (handlers fall back to the middleware's).
    user_id : str | None
        User id for context.
    details : dict | list | str | None
        Machine-readable details (e.g., field errors, ids).
    headers : dict | None
        Optional headers.
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        request_id: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.user_id: Optional[str] = user_id
        self.details: Optional[Any] = details

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return the failure envelope: `{success: false, message, code, request_id}`."""
        body: Dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# 🔑 Authentication / authorization
# ──────────────────────────────────────────────────────────────
class Unauthenticated(AppException):
    """No/invalid/expired session token, or the subject no longer exists."""

    def __init__(self, message: str = "User could not be identified", **kwargs: Any) -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, message=message, **kwargs)


class Forbidden(AppException):
    """The subject exists but its role does not allow the operation."""

    def __init__(self, message: str = "Admins only", **kwargs: Any) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, message=message, **kwargs)


# ──────────────────────────────────────────────────────────────
# 🧾 Domain errors
# ──────────────────────────────────────────────────────────────
class InvalidInput(AppException):
    """Malformed quality tag, missing file, non-numeric numeric field, etc."""

    def __init__(self, message: str = "Invalid input", **kwargs: Any) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, message=message, **kwargs)


class NotFound(AppException):
    """A referenced movie or user does not exist."""

    def __init__(self, message: str = "Not found", **kwargs: Any) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, message=message, **kwargs)
