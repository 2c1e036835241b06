from __future__ import annotations

"""User persistence for the admin surface.

Two operations only: resolve a user (role lookup for the authorization gate,
target lookup for promotion) and rewrite a user's role.
"""

import logging
import uuid
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.db.models.user import User
from app.schemas.enums import UserRole

logger = logging.getLogger("repositories.users")

IdLike = Union[str, uuid.UUID]


def as_uuid(value: IdLike) -> Optional[uuid.UUID]:
    """Parse an id into a UUID; None when it is not one (treated as "no such row")."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        return None


class UserRepositoryProtocol:
    async def find_user_by_id(self, user_id: IdLike) -> Optional[User]:
        raise NotImplementedError

    async def update_user_role(self, user_id: IdLike, role: UserRole) -> User:
        raise NotImplementedError


class SqlUserRepository(UserRepositoryProtocol):
    """SQLAlchemy implementation. Reads are never cached; every call hits the DB."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_user_by_id(self, user_id: IdLike) -> Optional[User]:
        uid = as_uuid(user_id)
        if uid is None:
            return None
        return (await self.db.execute(select(User).where(User.id == uid))).scalar_one_or_none()

    async def update_user_role(self, user_id: IdLike, role: UserRole) -> User:
        user = await self.find_user_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        user.role = role
        try:
            await self.db.flush()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(user)
        return user


__all__ = ["IdLike", "as_uuid", "UserRepositoryProtocol", "SqlUserRepository"]
