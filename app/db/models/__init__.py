"""ORM models for the KinoAdmin catalog."""

from app.db.models.user import User
from app.db.models.movie import Movie
from app.db.models.movie_file import MovieFile
from app.db.models.review import Review

__all__ = ["User", "Movie", "MovieFile", "Review"]
