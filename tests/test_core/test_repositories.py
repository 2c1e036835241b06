# tests/test_core/test_repositories.py

import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import NotFound
from app.repositories.movies import SlugTaken, SqlMovieRepository
from app.repositories.users import SqlUserRepository, as_uuid
from app.schemas.enums import UserRole


class _Result:
    def __init__(self, value):
        self._value = value

    def scalar_one_or_none(self):
        return self._value


class FakeDB:
    """Just enough AsyncSession surface for the repositories."""

    def __init__(self, row=None, fail_commit=False, flush_error=None):
        self.row = row
        self.fail_commit = fail_commit
        self.flush_error = flush_error
        self.executed = 0
        self.calls = []

    async def execute(self, stmt):
        self.executed += 1
        return _Result(self.row)

    def add(self, obj):
        self.calls.append("add")

    async def flush(self):
        self.calls.append("flush")
        if self.flush_error is not None:
            raise self.flush_error

    async def commit(self):
        self.calls.append("commit")
        if self.fail_commit:
            raise RuntimeError("db down")

    async def rollback(self):
        self.calls.append("rollback")

    async def refresh(self, obj):
        self.calls.append("refresh")

    async def delete(self, obj):
        self.calls.append("delete")


def test_as_uuid_parses_or_returns_none():
    uid = uuid.uuid4()
    assert as_uuid(uid) is uid
    assert as_uuid(f" {uid} ") == uid
    assert as_uuid("42") is None
    assert as_uuid(None) is None


async def test_malformed_id_never_queries():
    db = FakeDB()
    assert await SqlUserRepository(db).find_user_by_id("not-a-uuid") is None
    assert await SqlMovieRepository(db).find_movie_by_id("not-a-uuid") is None
    assert db.executed == 0


async def test_update_user_role_commits_and_refreshes():
    user = SimpleNamespace(id=uuid.uuid4(), role=UserRole.USER)
    db = FakeDB(row=user)

    out = await SqlUserRepository(db).update_user_role(user.id, UserRole.ADMIN)

    assert out is user and user.role is UserRole.ADMIN
    assert db.calls == ["flush", "commit", "refresh"]


async def test_update_user_role_rolls_back_on_commit_failure():
    db = FakeDB(row=SimpleNamespace(id=uuid.uuid4(), role=UserRole.USER), fail_commit=True)
    with pytest.raises(RuntimeError):
        await SqlUserRepository(db).update_user_role(db.row.id, UserRole.ADMIN)
    assert db.calls == ["flush", "commit", "rollback"]


async def test_missing_movie_is_not_found_without_writes():
    db = FakeDB(row=None)
    repo = SqlMovieRepository(db)

    with pytest.raises(NotFound):
        await repo.delete_movie(uuid.uuid4())
    with pytest.raises(NotFound):
        await repo.update_movie(uuid.uuid4(), {"title": "x"})
    assert db.calls == []


async def test_delete_movie_commits():
    movie = SimpleNamespace(id=uuid.uuid4())
    db = FakeDB(row=movie)
    await SqlMovieRepository(db).delete_movie(movie.id)
    assert db.calls == ["delete", "flush", "commit"]


def _integrity(constraint):
    orig = Exception(f'duplicate key value violates unique constraint "{constraint}"')
    return IntegrityError("INSERT INTO movies ...", {}, orig)


MOVIE_FIELDS = {
    "title": "Dune",
    "slug": "dune",
    "release_year": 2021,
    "duration_minutes": 155,
    "subscription_type": "free",
    "poster_url": "/uploads/p.jpg",
    "rating": 0,
}


async def test_create_movie_maps_slug_conflict():
    db = FakeDB(flush_error=_integrity("uq_movies_slug"))
    with pytest.raises(SlugTaken) as ei:
        await SqlMovieRepository(db).create_movie(dict(MOVIE_FIELDS))
    assert ei.value.slug == "dune"
    assert db.calls == ["add", "flush", "rollback"]


async def test_create_movie_other_integrity_errors_propagate():
    db = FakeDB(flush_error=_integrity("fk_movies_created_by_users"))
    with pytest.raises(IntegrityError):
        await SqlMovieRepository(db).create_movie(dict(MOVIE_FIELDS))
