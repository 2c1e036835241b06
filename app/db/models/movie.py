from __future__ import annotations

"""
🎬 KinoAdmin — Movie (catalog entry)
===================================

A catalog movie managed exclusively through the admin surface.

Conventions
-----------
• `slug` is derived from the title at creation time and is unique.
• `subscription_type` is a free-form, trimmed tier tag (e.g. `free`, `premium`).
• `poster_url` is a **relative** path under the uploads prefix (`/uploads/...`).
• `rating` starts at 0; reviews adjust it elsewhere.

Relationships
-------------
• `Movie.creator` ↔ `User.movies`
• `Movie.files`   ↔ `MovieFile.movie` (DB cascade on delete)
• `Movie.reviews` ↔ `Review.movie`    (DB cascade on delete)
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin


class Movie(UUIDPKMixin, TimestampMixin, Base):
    """Catalog movie with poster, tier tag, and attached quality variants."""

    __tablename__ = "movies"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    release_year = Column(Integer, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    subscription_type = Column(String(32), nullable=False, server_default=text("'free'"))
    poster_url = Column(String(1024), nullable=True)
    rating = Column(Numeric(3, 1), nullable=False, default=0, server_default=text("0"))
    view_count = Column(Integer, nullable=False, default=0, server_default=text("0"))

    created_by = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(btrim(title)) > 0", name="title_not_blank"),
        CheckConstraint("length(btrim(subscription_type)) > 0", name="subscription_type_not_blank"),
        CheckConstraint("duration_minutes >= 0", name="duration_nonneg"),
        CheckConstraint("view_count >= 0", name="view_count_nonneg"),
        CheckConstraint("rating >= 0 AND rating <= 10", name="rating_range"),
        Index("ix_movies_created_at", "created_at"),
    )

    # ── Relationships ───────────────────────────────────────────────────────
    creator = relationship("User", back_populates="movies", lazy="noload")
    files = relationship(
        "MovieFile",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
    reviews = relationship(
        "Review",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )
