from __future__ import annotations

"""
🎞️ KinoAdmin — MovieFile (per-quality video files)
=================================================

One uploaded video rendition of a `Movie`, tagged with a quality tier and an
audio language. A movie may own any number of files; repeated uploads with the
same (quality, language) pair are kept as separate rows on purpose.
"""

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin
from app.schemas.enums import VideoQuality


class MovieFile(UUIDPKMixin, TimestampMixin, Base):
    """A playable file for a movie at one quality tier."""

    __tablename__ = "movie_files"

    movie_id = Column(
        UUID(as_uuid=True),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quality = Column(Enum(VideoQuality, name="video_quality"), nullable=False)
    language = Column(String(16), nullable=False, doc="Audio language tag (e.g., 'uz', 'en', 'ru').")
    file_url = Column(String(1024), nullable=False, doc="Relative path under the uploads prefix.")
    size_mb = Column(Integer, nullable=True, doc="Rounded size of the uploaded file in MiB.")

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(btrim(file_url)) > 0", name="file_url_not_blank"),
        CheckConstraint("length(btrim(language)) > 0", name="language_not_blank"),
        CheckConstraint("(size_mb IS NULL) OR (size_mb >= 0)", name="size_nonneg"),
        Index("ix_movie_files_movie_quality", "movie_id", "quality"),
    )

    movie = relationship("Movie", back_populates="files", lazy="noload")
