"""
KinoAdmin — SQLAlchemy Base registry
====================================

Import all ORM models so their tables are registered on `Base.metadata`.
Alembic autogeneration imports this module; relationship targets resolve at
import time.

Tip: Keep this file import-only; no runtime logic.
"""

from app.db.base_class import Base

from app.db.models.user import User
from app.db.models.movie import Movie
from app.db.models.movie_file import MovieFile
from app.db.models.review import Review

__all__ = [
    "Base",
    "User",
    "Movie",
    "MovieFile",
    "Review",
]
