from __future__ import annotations

"""Movie catalog persistence.

Provides the interface the admin catalog service depends on and a SQLAlchemy
implementation over `movies`, `movie_files` and `reviews`. Each mutating call
is a single statement committed on its own, so a failed call leaves no partial
write behind.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.db.models.movie import Movie
from app.db.models.movie_file import MovieFile
from app.db.models.review import Review
from app.repositories.users import IdLike, as_uuid

logger = logging.getLogger("repositories.movies")

SLUG_CONSTRAINT = "uq_movies_slug"


class SlugTaken(Exception):
    """Another row claimed `slug` between the existence check and the insert."""

    def __init__(self, slug: str) -> None:
        super().__init__(slug)
        self.slug = slug


@dataclass
class MovieWithReviews:
    """A movie row plus its aggregated review count."""
    movie: Movie
    review_count: int


class MovieRepositoryProtocol:
    async def find_movie_by_id(self, movie_id: IdLike) -> Optional[Movie]:
        raise NotImplementedError

    async def slug_exists(self, slug: str) -> bool:
        raise NotImplementedError

    async def create_movie(self, fields: Dict[str, Any]) -> Movie:
        """Insert a movie; raises `SlugTaken` when `fields["slug"]` is already used."""
        raise NotImplementedError

    async def update_movie(self, movie_id: IdLike, fields: Dict[str, Any]) -> Movie:
        """Apply `fields`; raises `NotFound` when the id does not exist."""
        raise NotImplementedError

    async def delete_movie(self, movie_id: IdLike) -> None:
        """Delete the row; raises `NotFound` when the id does not exist."""
        raise NotImplementedError

    async def list_movies(self) -> List[MovieWithReviews]:
        """All movies, newest first, with review counts."""
        raise NotImplementedError

    async def count_movies(self) -> int:
        raise NotImplementedError

    async def create_movie_file(self, fields: Dict[str, Any]) -> MovieFile:
        raise NotImplementedError


class SqlMovieRepository(MovieRepositoryProtocol):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.flush()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def find_movie_by_id(self, movie_id: IdLike) -> Optional[Movie]:
        mid = as_uuid(movie_id)
        if mid is None:
            return None
        return (await self.db.execute(select(Movie).where(Movie.id == mid))).scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        stmt = select(Movie.id).where(func.lower(Movie.slug) == slug.strip().lower())
        return (await self.db.execute(stmt)).scalar_one_or_none() is not None

    async def create_movie(self, fields: Dict[str, Any]) -> Movie:
        movie = Movie(**fields)
        self.db.add(movie)
        try:
            await self._commit()
        except IntegrityError as e:
            if SLUG_CONSTRAINT in str(getattr(e, "orig", e)):
                raise SlugTaken(fields.get("slug", "")) from e
            raise
        await self.db.refresh(movie)
        return movie

    async def update_movie(self, movie_id: IdLike, fields: Dict[str, Any]) -> Movie:
        movie = await self.find_movie_by_id(movie_id)
        if movie is None:
            raise NotFound("Movie not found")
        for key, value in fields.items():
            setattr(movie, key, value)
        await self._commit()
        await self.db.refresh(movie)
        return movie

    async def delete_movie(self, movie_id: IdLike) -> None:
        movie = await self.find_movie_by_id(movie_id)
        if movie is None:
            raise NotFound("Movie not found")
        await self.db.delete(movie)
        await self._commit()

    async def list_movies(self) -> List[MovieWithReviews]:
        review_counts = (
            select(Review.movie_id, func.count(Review.id).label("review_count"))
            .group_by(Review.movie_id)
            .subquery()
        )
        stmt = (
            select(Movie, func.coalesce(review_counts.c.review_count, 0))
            .outerjoin(review_counts, review_counts.c.movie_id == Movie.id)
            .order_by(Movie.created_at.desc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [MovieWithReviews(movie=m, review_count=int(c or 0)) for m, c in rows]

    async def count_movies(self) -> int:
        return int((await self.db.execute(select(func.count(Movie.id)))).scalar_one() or 0)

    async def create_movie_file(self, fields: Dict[str, Any]) -> MovieFile:
        movie_file = MovieFile(**fields)
        self.db.add(movie_file)
        await self._commit()
        await self.db.refresh(movie_file)
        return movie_file


__all__ = [
    "SLUG_CONSTRAINT",
    "SlugTaken",
    "MovieWithReviews",
    "MovieRepositoryProtocol",
    "SqlMovieRepository",
]
