from __future__ import annotations

"""
👤 KinoAdmin — User (accounts & roles)
=====================================

Account record as seen by the admin surface. Credentials and session issuance
live in the auth service; this service only **reads** the role on every guarded
call and **writes** it when promoting a user to admin.

Design highlights
-----------------
• **Case-insensitive uniqueness** for email (functional index).
• **Role enum** (`user` / `admin` / `superadmin`) with DB default `user`.
• **DB-driven, tz-aware timestamps** (`func.now()`; `timezone=True`).
"""

from sqlalchemy import CheckConstraint, Column, Enum, Index, String, func, text
from sqlalchemy.orm import relationship

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin
from app.schemas.enums import UserRole


class User(UUIDPKMixin, TimestampMixin, Base):
    """Platform account; `role` gates every catalog mutation."""

    __tablename__ = "users"

    email = Column(String(320), nullable=False)
    username = Column(String(64), nullable=True, unique=True)
    full_name = Column(String(255), nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        server_default=text("'user'"),
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(btrim(email)) > 0", name="email_not_blank"),
        Index("uq_users_email_lower", func.lower(email), unique=True),
        Index("ix_users_role", "role"),
    )

    # ── Relationships ───────────────────────────────────────────────────────
    movies = relationship(
        "Movie",
        back_populates="creator",
        passive_deletes=True,
        lazy="noload",
    )
    reviews = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={getattr(self.role, 'value', self.role)})>"
