from __future__ import annotations

"""
KinoAdmin · Admin catalog service
=================================

Guarded business operations behind the admin routes:

- list_movies         : newest first, with review counts and a total
- create_movie        : new movie (rating 0, creator = caller), poster stored
- update_movie        : partial update, `id/title/created_at` projection back
- delete_movie        : hard delete (DB cascades files & reviews)
- upload_movie_file   : attach a quality-tagged video file to a movie
- promote_to_admin    : set a user's role to `admin` (idempotent)

Every method except `promote_to_admin` is wrapped by `guarded`, so the
authorization gate runs before anything else: a failed gate means no read
beyond the role lookup, no upload written and no row touched.
`promote_to_admin` is left ungated here; the route that exposes it applies its
own gate (see `promoter_identity`).

Uploads arrive raw and are written through `storage` only after the request
has been validated; a stored file is discarded again if persisting the row
fails.

Results use the envelope the HTTP layer returns verbatim:
`{"success": bool, "message"?: str, "data"?: object}`.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from fastapi import UploadFile
from pydantic import BaseModel, ValidationError
from slugify import slugify

from app.core.exceptions import InvalidInput, NotFound
from app.core.storage import LocalUploadStorage
from app.db.models.movie import Movie
from app.db.models.movie_file import MovieFile
from app.dependencies.admin import AuthorizationGate, AuthorizedIdentity, guarded
from app.repositories.movies import MovieRepositoryProtocol, SlugTaken
from app.repositories.users import IdLike, UserRepositoryProtocol
from app.schemas.enums import UserRole
from app.schemas.movie import MovieCreateIn, MovieFileIn, MovieUpdateIn

logger = logging.getLogger("catalog")

M = TypeVar("M", bound=BaseModel)

MIB = 1024 * 1024
SLUG_MAX_ATTEMPTS = 50
SLUG_RACE_RETRIES = 3


# ─────────────────────────────────────────────────────────────────────────────
# 🧩 Helpers
# ─────────────────────────────────────────────────────────────────────────────
def _validate(model: Type[M], payload: Mapping[str, Any]) -> M:
    """Validate raw input, mapping Pydantic errors to `InvalidInput` (400)."""
    try:
        return model.model_validate(dict(payload))
    except ValidationError as ve:
        errors = [
            {"field": ".".join(str(p) for p in e.get("loc", ())), "error": e.get("msg")}
            for e in ve.errors()
        ]
        fields = ", ".join(e["field"] for e in errors if e["field"]) or "input"
        raise InvalidInput(f"Invalid value for: {fields}", details=errors)


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool((getattr(upload, "filename", None) or "").strip())


def _round_mb(size_bytes: int) -> int:
    """Round half-up to whole MiB."""
    return int(size_bytes / MIB + 0.5)


def _movie_summary(m: Movie) -> Dict[str, Any]:
    return {"id": m.id, "title": m.title, "created_at": m.created_at}


def _movie_list_item(m: Movie, review_count: int) -> Dict[str, Any]:
    return {
        "id": m.id,
        "title": m.title,
        "slug": m.slug,
        "release_year": m.release_year,
        "subscription_type": m.subscription_type,
        "view_count": m.view_count,
        "review_count": review_count,
        "created_at": m.created_at,
        "created_by": m.created_by,
    }


def _movie_file_out(f: MovieFile) -> Dict[str, Any]:
    return {
        "id": f.id,
        "movie_id": f.movie_id,
        "quality": getattr(f.quality, "value", f.quality),
        "language": f.language,
        "file_url": f.file_url,
    }


def _user_out(u: Any) -> Dict[str, Any]:
    role = getattr(u, "role", None)
    return {
        "id": u.id,
        "email": getattr(u, "email", None),
        "username": getattr(u, "username", None),
        "role": getattr(role, "value", role),
    }


# ─────────────────────────────────────────────────────────────────────────────
# 🎬 Service
# ─────────────────────────────────────────────────────────────────────────────
class AdminCatalogService:
    def __init__(
        self,
        movies: MovieRepositoryProtocol,
        users: UserRepositoryProtocol,
        gate: Optional[AuthorizationGate] = None,
        storage: Optional[LocalUploadStorage] = None,
    ) -> None:
        self.movies = movies
        self.users = users
        self.gate = gate or AuthorizationGate(users)
        self.storage = storage or LocalUploadStorage()

    async def _unique_slug(self, title: str) -> str:
        base = slugify(title, max_length=200) or "movie"
        candidate = base
        for n in range(2, SLUG_MAX_ATTEMPTS + 2):
            if not await self.movies.slug_exists(candidate):
                return candidate
            candidate = f"{base}-{n}"
        raise InvalidInput("Could not derive a unique slug for this title")

    async def _insert_with_unique_slug(self, title: str, fields: Dict[str, Any]) -> Movie:
        """Insert under a fresh slug, re-deriving it when a concurrent insert claims it first."""
        for _ in range(SLUG_RACE_RETRIES):
            slug = await self._unique_slug(title)
            try:
                return await self.movies.create_movie({**fields, "slug": slug})
            except SlugTaken:
                logger.info(f"Slug '{slug}' taken concurrently; retrying")
        raise InvalidInput("Could not derive a unique slug for this title")

    # ── List ───────────────────────────────────────────────────────────────
    @guarded
    async def list_movies(self, identity: AuthorizedIdentity) -> Dict[str, Any]:
        rows = await self.movies.list_movies()
        total = await self.movies.count_movies()
        return {
            "success": True,
            "data": {
                "movies": [_movie_list_item(r.movie, r.review_count) for r in rows],
                "total": total,
            },
        }

    # ── Create ─────────────────────────────────────────────────────────────
    @guarded
    async def create_movie(
        self,
        identity: AuthorizedIdentity,
        payload: Mapping[str, Any],
        poster: Optional[UploadFile],
    ) -> Dict[str, Any]:
        data = _validate(MovieCreateIn, payload)
        if not _has_file(poster):
            raise InvalidInput("Poster file was not uploaded")

        stored = await self.storage.save_poster(poster)
        if stored is None:
            raise InvalidInput("Poster file was not uploaded")
        fields = {
            "title": data.title,
            "description": data.description,
            "release_year": data.release_year,
            "duration_minutes": data.duration_minutes,
            "subscription_type": data.subscription_type,
            "poster_url": stored.url,
            "created_by": identity.user_id,
            "rating": 0,
        }
        try:
            movie = await self._insert_with_unique_slug(data.title, fields)
        except Exception:
            await self.storage.discard(stored)
            raise

        logger.info(f"Movie {movie.id} created by {identity.user_id}")
        return {
            "success": True,
            "message": "New movie created successfully",
            "data": _movie_summary(movie),
        }

    # ── Update ─────────────────────────────────────────────────────────────
    @guarded
    async def update_movie(
        self,
        identity: AuthorizedIdentity,
        movie_id: IdLike,
        payload: Mapping[str, Any],
    ) -> Dict[str, Any]:
        changes = _validate(MovieUpdateIn, payload).model_dump(exclude_unset=True)
        if not changes:
            raise InvalidInput("No fields to update")

        movie = await self.movies.update_movie(movie_id, changes)
        logger.info(f"Movie {movie.id} updated by {identity.user_id}: {sorted(changes)}")
        return {
            "success": True,
            "message": "Movie updated successfully",
            "data": _movie_summary(movie),
        }

    # ── Delete ─────────────────────────────────────────────────────────────
    @guarded
    async def delete_movie(self, identity: AuthorizedIdentity, movie_id: IdLike) -> Dict[str, Any]:
        await self.movies.delete_movie(movie_id)
        logger.info(f"Movie {movie_id} deleted by {identity.user_id}")
        return {"success": True, "message": "Movie deleted successfully"}

    # ── Attach video file ──────────────────────────────────────────────────
    @guarded
    async def upload_movie_file(
        self,
        identity: AuthorizedIdentity,
        movie_id: IdLike,
        file: Optional[UploadFile],
        payload: Mapping[str, Any],
    ) -> Dict[str, Any]:
        data = _validate(MovieFileIn, payload)
        if not _has_file(file):
            raise InvalidInput("File was not uploaded")

        movie = await self.movies.find_movie_by_id(movie_id)
        if movie is None:
            raise NotFound("Movie not found")

        stored = await self.storage.save_video(file)
        if stored is None:
            raise InvalidInput("File was not uploaded")
        try:
            movie_file = await self.movies.create_movie_file(
                {
                    "movie_id": movie.id,
                    "quality": data.quality,
                    "language": data.language,
                    "file_url": stored.url,
                    "size_mb": _round_mb(stored.size_bytes),
                }
            )
        except Exception:
            await self.storage.discard(stored)
            raise

        logger.info(f"File {movie_file.id} ({data.quality.value}/{data.language}) attached to movie {movie.id}")
        return {
            "success": True,
            "message": "Movie file uploaded successfully",
            "data": _movie_file_out(movie_file),
        }

    # ── Promote ────────────────────────────────────────────────────────────
    async def promote_to_admin(self, user_id: IdLike) -> Dict[str, Any]:
        user = await self.users.find_user_by_id(user_id)
        if user is None:
            raise NotFound("User not found")

        role = getattr(user.role, "value", user.role)
        if role == UserRole.ADMIN.value:
            return {"success": False, "message": "User is already an admin"}
        if role == UserRole.SUPERADMIN.value:
            # never demoted through this path
            return {"success": False, "message": "User already has superadmin privileges"}

        updated = await self.users.update_user_role(user.id, UserRole.ADMIN)
        logger.info(f"User {updated.id} promoted to admin")
        return {
            "success": True,
            "message": "User promoted to admin",
            "data": _user_out(updated),
        }


__all__ = ["AdminCatalogService"]
