from __future__ import annotations

"""
⭐ KinoAdmin — Review
====================

User reviews of a movie. The admin surface never writes reviews; it only
aggregates them (`review_count` in the movie listing).
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, SmallInteger, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin


class Review(UUIDPKMixin, TimestampMixin, Base):
    """A user's rating (1..10) and optional comment for a movie."""

    __tablename__ = "reviews"

    movie_id = Column(UUID(as_uuid=True), ForeignKey("movies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(SmallInteger, nullable=False)
    comment = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 10", name="rating_range"),
        UniqueConstraint("user_id", "movie_id", name="uq_reviews_user_movie"),
    )

    movie = relationship("Movie", back_populates="reviews", lazy="noload")
    user = relationship("User", back_populates="reviews", lazy="noload")
