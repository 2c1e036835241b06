# app/core/jwt.py
from __future__ import annotations

"""
KinoAdmin — Session token verification
======================================
- `verify_session` checks signature + standard claims (exp/nbf/iat), enforces
  issuer/audience when configured, and extracts the subject identifier.
- Optional Redis JTI revocation lane (`revoked:jti:{jti}`).
- `get_session_token` reads the raw token from the request's cookie store.

Notes
-----
- Tokens are *issued* elsewhere; this module never mints.
- The subject lives in `user_id` (issuer convention), falling back to `sub`.
- If Redis fails during the revocation check, behavior is controlled by
  `AUTH_FAIL_OPEN` (default: False → fail-closed with HTTP 503).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException, Request, status
from jose import jwt, JWTError, ExpiredSignatureError

from app.core.config import settings
from app.core.exceptions import Unauthenticated
from app.core.redis_client import redis_wrapper

logger = logging.getLogger("auth")


@dataclass(frozen=True)
class SessionClaims:
    """Verified identity claim extracted from a session token."""
    subject_id: str
    claims: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


# ─────────────────────────────────────────────────────────────
# 🔧 Internal helpers
# ─────────────────────────────────────────────────────────────
async def _is_revoked(jti: str) -> bool:
    """Return True if the token with this JTI is revoked.

    - No Redis client configured → not revoked (tests/dev).
    - On Redis errors: fail-open if AUTH_FAIL_OPEN, else 503.
    """
    try:
        return await redis_wrapper.is_revoked(jti)
    except Exception as e:  # real runtime/IO errors
        if settings.AUTH_FAIL_OPEN:
            logger.error(f"Redis unavailable during revocation check (fail-open): {e}")
            return False
        logger.error(f"Redis unavailable during revocation check (fail-closed): {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Auth service temporarily unavailable.",
        )


# ─────────────────────────────────────────────────────────────
# 🔓 Verify a session token
# ─────────────────────────────────────────────────────────────
async def verify_session(token: Optional[str], *, verify_revocation: bool = True) -> SessionClaims:
    """Verify a session token and return its subject.

    Raises
    ------
    Unauthenticated
        token absent/blank, bad signature, expired, malformed, missing subject,
        or revoked.
    HTTPException(503)
        Redis down during the revocation check and fail-closed configured.
    """
    if not token or not token.strip():
        logger.info("Session token missing.")
        raise Unauthenticated("Session token missing")

    issuer = settings.JWT_ISSUER or None
    audience = settings.JWT_AUDIENCE or None

    try:
        payload = jwt.decode(
            token.strip(),
            settings.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": bool(audience)},
            audience=audience,
            issuer=issuer,
        )
    except ExpiredSignatureError:
        logger.info("Session token expired.")
        raise Unauthenticated("Session token has expired")
    except JWTError as e:
        logger.warning(f"Session token rejected: {e}")
        raise Unauthenticated("Invalid session token")

    subject = payload.get("user_id") or payload.get("sub")
    if subject is None or not str(subject).strip():
        logger.warning("Session token has no user_id/sub claim.")
        raise Unauthenticated("Session token missing user id")

    jti = payload.get("jti")
    if verify_revocation and jti and await _is_revoked(str(jti)):
        logger.warning(f"Session token with JTI {jti} has been revoked.")
        raise Unauthenticated("Session token has been revoked")

    return SessionClaims(subject_id=str(subject).strip(), claims=payload)


# ─────────────────────────────────────────────────────────────
# 🍪 Extract the session token from the cookie store
# ─────────────────────────────────────────────────────────────
def get_session_token(request: Request) -> Optional[str]:
    """FastAPI dependency: raw session token from the configured cookie (or None)."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


__all__ = [
    "SessionClaims",
    "verify_session",
    "get_session_token",
]
