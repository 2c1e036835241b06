from __future__ import annotations

"""
Admin authorization gate
------------------------
The single checkpoint every catalog mutation passes through. Keeps the
verify-token → resolve-role → check-role sequence in one place instead of
repeating it per operation.

Exports
- AuthorizedIdentity: subject id + role that passed the gate
- AuthorizationGate: `authorize(token, roles=...)`, fresh role lookup per call
- guarded(...): decorator applying the gate to a service method
- get_authorization_gate: FastAPI dependency building a gate on the request's DB session
- promoter_identity: FastAPI dependency gating the promote route from the session cookie
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import Forbidden, Unauthenticated
from app.core.jwt import SessionClaims, get_session_token, verify_session
from app.db.session import get_async_db
from app.repositories.users import SqlUserRepository, UserRepositoryProtocol
from app.schemas.enums import ADMIN_ROLES, SUPERADMIN_ROLES, UserRole

logger = logging.getLogger("auth")

SessionVerifier = Callable[[Optional[str]], Awaitable[SessionClaims]]
F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


@dataclass(frozen=True)
class AuthorizedIdentity:
    user_id: str
    role: UserRole


def _coerce_role(raw: Any) -> Optional[UserRole]:
    """Accept enum members or raw DB strings; unknown values yield None."""
    try:
        return UserRole(getattr(raw, "value", raw))
    except ValueError:
        return None


class AuthorizationGate:
    """Verify a session token and require one of `roles` for its subject.

    The role is resolved from persistence on every call, so a promotion or
    demotion takes effect on the very next request.
    """

    def __init__(self, users: UserRepositoryProtocol, verifier: SessionVerifier = verify_session) -> None:
        self.users = users
        self.verifier = verifier

    async def authorize(
        self,
        token: Optional[str],
        *,
        roles: Iterable[UserRole] = ADMIN_ROLES,
    ) -> AuthorizedIdentity:
        claims = await self.verifier(token)

        user = await self.users.find_user_by_id(claims.subject_id)
        if user is None:
            logger.warning("Session subject no longer exists")
            raise Unauthenticated("User could not be identified")

        role = _coerce_role(getattr(user, "role", None))
        allowed: FrozenSet[UserRole] = frozenset(roles)
        if role is None or role not in allowed:
            logger.info(f"Role '{getattr(role, 'value', role)}' denied (allowed: {sorted(r.value for r in allowed)})")
            raise Forbidden("Admins only" if allowed == ADMIN_ROLES else "Superadmins only")

        return AuthorizedIdentity(user_id=str(user.id), role=role)


def guarded(fn: Optional[F] = None, *, roles: Iterable[UserRole] = ADMIN_ROLES):
    """Gate a service coroutine method.

    The wrapped method is called as `method(self, token, *args)`; the gate
    (`self.gate`) turns `token` into an `AuthorizedIdentity`, which the
    original method receives in its place. Nothing in the method body runs
    unless the gate passes.
    """
    allowed = frozenset(roles)

    def decorate(method: F) -> F:
        @functools.wraps(method)
        async def wrapper(self, token: Optional[str], *args: Any, **kwargs: Any) -> Any:
            identity = await self.gate.authorize(token, roles=allowed)
            return await method(self, identity, *args, **kwargs)

        wrapper.__guarded_roles__ = allowed  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    if fn is not None:
        return decorate(fn)
    return decorate


# ─────────────────────────────────────────────────────────────────────────────
# FastAPI dependencies
# ─────────────────────────────────────────────────────────────────────────────
async def get_authorization_gate(db: AsyncSession = Depends(get_async_db)) -> AuthorizationGate:
    return AuthorizationGate(SqlUserRepository(db))


async def promoter_identity(
    token: Optional[str] = Depends(get_session_token),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> AuthorizedIdentity:
    """Who may promote users: superadmins, or any admin when the policy is relaxed."""
    roles = SUPERADMIN_ROLES if settings.PROMOTE_REQUIRES_SUPERADMIN else ADMIN_ROLES
    return await gate.authorize(token, roles=roles)


__all__ = [
    "AuthorizedIdentity",
    "AuthorizationGate",
    "guarded",
    "get_authorization_gate",
    "promoter_identity",
]
