# tests/test_admin/test_catalog_service.py

import uuid
from datetime import timedelta

import pytest

from app.core.exceptions import Forbidden, InvalidInput, NotFound, Unauthenticated
from app.schemas.enums import UserRole, VideoQuality
from tests.fixtures.repos import FakeUpload
from tests.fixtures.tokens import make_session_token

MIB = 1024 * 1024

VALID_MOVIE = {
    "title": "The Long Road",
    "description": "Two brothers, one truck.",
    "release_year": "2020",
    "duration_minutes": "118",
    "subscription_type": " premium ",
}


def _poster():
    return FakeUpload(filename="poster.jpg", content_type="image/jpeg", size=2048)


def _guarded_calls(catalog, token):
    """One call per guarded operation, each with otherwise valid arguments."""
    movie = catalog.movies.seed("Target")
    return [
        lambda: catalog.service.list_movies(token),
        lambda: catalog.service.create_movie(token, dict(VALID_MOVIE), _poster()),
        lambda: catalog.service.update_movie(token, movie.id, {"title": "Renamed"}),
        lambda: catalog.service.upload_movie_file(token, movie.id, FakeUpload(), {"quality": "720p", "language": "en"}),
        lambda: catalog.service.delete_movie(token, movie.id),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Gate properties
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("token", [None, "", "garbage", "expired"])
async def test_every_guarded_op_rejects_missing_or_bad_token_without_writes(catalog, token):
    if token == "expired":
        token = make_session_token(catalog.admin.id, expires_in=timedelta(seconds=-5))

    for call in _guarded_calls(catalog, token):
        with pytest.raises(Unauthenticated):
            await call()

    assert catalog.movies.writes == []
    assert catalog.storage.saved == []


async def test_every_guarded_op_forbids_plain_users_without_writes(catalog):
    token = make_session_token(catalog.plain.id)
    for call in _guarded_calls(catalog, token):
        with pytest.raises(Forbidden):
            await call()

    assert catalog.movies.writes == []
    assert catalog.storage.saved == []


@pytest.mark.parametrize("who", ["admin", "superadmin"])
async def test_admins_reach_persistence(catalog, who):
    token = make_session_token(getattr(catalog, who).id)
    results = [await call() for call in _guarded_calls(catalog, token)]

    assert all(r["success"] for r in results)
    assert [w[0] for w in catalog.movies.writes] == ["create", "update", "file", "delete"]


async def test_unknown_subject_is_unauthenticated(catalog):
    token = make_session_token(uuid.uuid4())
    with pytest.raises(Unauthenticated):
        await catalog.service.list_movies(token)


async def test_gate_runs_before_input_validation(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(Unauthenticated):
        await catalog.service.upload_movie_file(None, movie.id, None, {"quality": "2k"})


# ─────────────────────────────────────────────────────────────────────────────
# List
# ─────────────────────────────────────────────────────────────────────────────

async def test_list_is_newest_first_with_review_counts_and_total(catalog):
    old = catalog.movies.seed("Old")
    new = catalog.movies.seed("New")
    catalog.movies.review_counts[str(old.id)] = 3

    out = await catalog.service.list_movies(make_session_token(catalog.admin.id))

    assert out["success"] is True
    assert out["data"]["total"] == 2
    movies = out["data"]["movies"]
    assert [m["title"] for m in movies] == ["New", "Old"]
    assert movies[0]["review_count"] == 0 and movies[1]["review_count"] == 3
    assert set(movies[0]) == {
        "id", "title", "slug", "release_year", "subscription_type",
        "view_count", "review_count", "created_at", "created_by",
    }
    assert movies[0]["id"] == new.id


async def test_list_empty_catalog(catalog):
    out = await catalog.service.list_movies(make_session_token(catalog.admin.id))
    assert out == {"success": True, "data": {"movies": [], "total": 0}}


# ─────────────────────────────────────────────────────────────────────────────
# Create
# ─────────────────────────────────────────────────────────────────────────────

async def test_create_scenario_trims_tier_and_sets_rating_and_creator(catalog):
    out = await catalog.service.create_movie(
        make_session_token(catalog.admin.id), dict(VALID_MOVIE), _poster()
    )

    assert out["success"] is True
    assert out["message"] == "New movie created successfully"
    assert set(out["data"]) == {"id", "title", "created_at"}

    stored = catalog.movies.movies[str(out["data"]["id"])]
    assert stored.subscription_type == "premium"
    assert stored.rating == 0
    assert stored.created_by == str(catalog.admin.id)
    assert stored.release_year == 2020 and stored.duration_minutes == 118
    assert stored.slug == "the-long-road"
    assert stored.poster_url == f"/uploads/{catalog.storage.saved[0].filename}"


async def test_create_dedupes_slug(catalog):
    catalog.movies.seed("Existing", slug="the-long-road")
    catalog.movies.seed("Existing 2", slug="the-long-road-2")
    out = await catalog.service.create_movie(
        make_session_token(catalog.admin.id), dict(VALID_MOVIE), _poster()
    )
    assert catalog.movies.movies[str(out["data"]["id"])].slug == "the-long-road-3"


async def test_create_title_without_sluggable_chars_falls_back(catalog):
    payload = {**VALID_MOVIE, "title": "!!!"}
    out = await catalog.service.create_movie(make_session_token(catalog.admin.id), payload, _poster())
    assert catalog.movies.movies[str(out["data"]["id"])].slug == "movie"


@pytest.mark.parametrize(
    "patch",
    [
        {"release_year": "twenty-twenty"},
        {"duration_minutes": "long"},
        {"subscription_type": "   "},
        {"title": ""},
        {"release_year": None},
    ],
)
async def test_create_rejects_bad_fields(catalog, patch):
    payload = {**VALID_MOVIE, **patch}
    payload = {k: v for k, v in payload.items() if v is not None}
    with pytest.raises(InvalidInput) as ei:
        await catalog.service.create_movie(make_session_token(catalog.admin.id), payload, _poster())
    assert ei.value.status_code == 400
    assert ei.value.details
    assert catalog.movies.writes == [] and catalog.storage.saved == []


@pytest.mark.parametrize("poster", [None, FakeUpload(filename="")])
async def test_create_requires_poster(catalog, poster):
    with pytest.raises(InvalidInput) as ei:
        await catalog.service.create_movie(make_session_token(catalog.admin.id), dict(VALID_MOVIE), poster)
    assert ei.value.message == "Poster file was not uploaded"
    assert catalog.movies.writes == []


async def test_create_discards_poster_when_insert_fails(catalog):
    catalog.movies.fail_next_write = RuntimeError("db down")
    with pytest.raises(RuntimeError):
        await catalog.service.create_movie(make_session_token(catalog.admin.id), dict(VALID_MOVIE), _poster())
    assert catalog.storage.discarded == catalog.storage.saved
    assert len(catalog.storage.saved) == 1


async def test_create_rederives_slug_taken_by_concurrent_insert(catalog, monkeypatch):
    catalog.movies.seed("Rival", slug="the-long-road")
    real_exists = catalog.movies.slug_exists
    checks = []

    async def stale_then_real(slug):
        # the first check runs before the rival insert becomes visible
        checks.append(slug)
        return False if len(checks) == 1 else await real_exists(slug)

    monkeypatch.setattr(catalog.movies, "slug_exists", stale_then_real)

    out = await catalog.service.create_movie(make_session_token(catalog.admin.id), dict(VALID_MOVIE), _poster())

    assert out["success"] is True
    assert catalog.movies.movies[str(out["data"]["id"])].slug == "the-long-road-2"
    assert catalog.storage.discarded == []


async def test_create_gives_up_when_slug_keeps_colliding(catalog, monkeypatch):
    catalog.movies.seed("Rival", slug="the-long-road")

    async def always_free(slug):
        return False

    monkeypatch.setattr(catalog.movies, "slug_exists", always_free)

    with pytest.raises(InvalidInput) as ei:
        await catalog.service.create_movie(make_session_token(catalog.admin.id), dict(VALID_MOVIE), _poster())
    assert ei.value.status_code == 400
    assert catalog.storage.discarded == catalog.storage.saved
    assert catalog.movies.writes == []



# ─────────────────────────────────────────────────────────────────────────────
# Update / delete
# ─────────────────────────────────────────────────────────────────────────────

async def test_update_applies_partial_fields(catalog):
    movie = catalog.movies.seed("Before", slug="before")
    out = await catalog.service.update_movie(
        make_session_token(catalog.admin.id),
        movie.id,
        {"title": "After", "duration_minutes": "99", "subscription_type": " vip "},
    )
    assert out["message"] == "Movie updated successfully"
    assert out["data"] == {"id": movie.id, "title": "After", "created_at": movie.created_at}
    assert movie.duration_minutes == 99 and movie.subscription_type == "vip"
    assert movie.slug == "before"


async def test_update_empty_patch_is_invalid(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(InvalidInput):
        await catalog.service.update_movie(make_session_token(catalog.admin.id), movie.id, {})


async def test_update_unknown_field_is_invalid(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(InvalidInput):
        await catalog.service.update_movie(make_session_token(catalog.admin.id), movie.id, {"view_count": 10})


async def test_update_missing_movie_is_not_found(catalog):
    with pytest.raises(NotFound):
        await catalog.service.update_movie(make_session_token(catalog.admin.id), uuid.uuid4(), {"title": "x"})


async def test_update_null_clears_description(catalog):
    movie = catalog.movies.seed(description="d")
    out = await catalog.service.update_movie(make_session_token(catalog.admin.id), movie.id, {"description": None})
    assert out["success"] is True
    assert movie.description is None
    assert catalog.movies.writes == [("update", str(movie.id), {"description": None})]


async def test_update_null_alongside_other_fields_is_applied(catalog):
    movie = catalog.movies.seed(description="d")
    await catalog.service.update_movie(
        make_session_token(catalog.admin.id), movie.id, {"title": "Kept", "description": None}
    )
    assert (movie.title, movie.description) == ("Kept", None)


@pytest.mark.parametrize("field", ["title", "release_year", "duration_minutes", "subscription_type", "rating"])
async def test_update_null_on_required_column_is_invalid(catalog, field):
    movie = catalog.movies.seed("Stays")
    with pytest.raises(InvalidInput) as ei:
        await catalog.service.update_movie(make_session_token(catalog.admin.id), movie.id, {field: None})
    assert any(d["field"] == field for d in ei.value.details)
    assert catalog.movies.writes == []
    assert movie.title == "Stays"



async def test_delete_removes_movie(catalog):
    movie = catalog.movies.seed()
    out = await catalog.service.delete_movie(make_session_token(catalog.superadmin.id), movie.id)
    assert out == {"success": True, "message": "Movie deleted successfully"}
    assert str(movie.id) not in catalog.movies.movies


async def test_delete_nonexistent_is_not_found(catalog):
    with pytest.raises(NotFound) as ei:
        await catalog.service.delete_movie(make_session_token(catalog.admin.id), uuid.uuid4())
    assert ei.value.status_code == 404


async def test_delete_without_cookie_keeps_movie(catalog):
    movie = catalog.movies.seed("M1")
    with pytest.raises(Unauthenticated):
        await catalog.service.delete_movie(None, movie.id)
    assert str(movie.id) in catalog.movies.movies


# ─────────────────────────────────────────────────────────────────────────────
# Attach video file
# ─────────────────────────────────────────────────────────────────────────────

async def test_attach_file_maps_quality_and_rounds_size(catalog):
    movie = catalog.movies.seed()
    upload = FakeUpload(size=int(2.5 * MIB))
    out = await catalog.service.upload_movie_file(
        make_session_token(catalog.admin.id), movie.id, upload, {"quality": "720P", "language": " en "}
    )

    assert out["message"] == "Movie file uploaded successfully"
    assert set(out["data"]) == {"id", "movie_id", "quality", "language", "file_url"}
    assert out["data"]["quality"] == VideoQuality.P720.value
    assert out["data"]["language"] == "en"
    row = catalog.movies.files[0]
    assert row.movie_id == movie.id
    assert row.size_mb == 3
    assert row.file_url.startswith("/uploads/")


async def test_attach_rejects_unknown_quality_before_touching_storage(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(InvalidInput):
        await catalog.service.upload_movie_file(
            make_session_token(catalog.admin.id), movie.id, FakeUpload(), {"quality": "2k", "language": "en"}
        )
    assert catalog.storage.saved == [] and catalog.movies.files == []


async def test_attach_requires_file(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(InvalidInput) as ei:
        await catalog.service.upload_movie_file(
            make_session_token(catalog.admin.id), movie.id, None, {"quality": "1080p", "language": "en"}
        )
    assert ei.value.message == "File was not uploaded"


async def test_attach_quality_is_checked_before_file_presence(catalog):
    movie = catalog.movies.seed()
    with pytest.raises(InvalidInput) as ei:
        await catalog.service.upload_movie_file(
            make_session_token(catalog.admin.id), movie.id, None, {"quality": "8k", "language": "en"}
        )
    assert "quality" in ei.value.message


async def test_attach_to_missing_movie_is_not_found_and_stores_nothing(catalog):
    with pytest.raises(NotFound):
        await catalog.service.upload_movie_file(
            make_session_token(catalog.admin.id), uuid.uuid4(), FakeUpload(), {"quality": "4k", "language": "en"}
        )
    assert catalog.storage.saved == []


async def test_attach_allows_duplicate_quality_language(catalog):
    movie = catalog.movies.seed()
    token = make_session_token(catalog.admin.id)
    for _ in range(2):
        await catalog.service.upload_movie_file(token, movie.id, FakeUpload(), {"quality": "480p", "language": "uz"})
    assert len(catalog.movies.files) == 2


async def test_attach_discards_file_when_insert_fails(catalog):
    movie = catalog.movies.seed()
    catalog.movies.fail_next_write = RuntimeError("db down")
    with pytest.raises(RuntimeError):
        await catalog.service.upload_movie_file(
            make_session_token(catalog.admin.id), movie.id, FakeUpload(), {"quality": "360p", "language": "ru"}
        )
    assert len(catalog.storage.discarded) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Promote
# ─────────────────────────────────────────────────────────────────────────────

async def test_promote_user_to_admin(catalog):
    out = await catalog.service.promote_to_admin(catalog.plain.id)
    assert out["success"] is True
    assert out["message"] == "User promoted to admin"
    assert out["data"]["role"] == "admin"
    assert set(out["data"]) == {"id", "email", "username", "role"}
    assert catalog.plain.role is UserRole.ADMIN


async def test_promote_is_idempotent(catalog):
    first = await catalog.service.promote_to_admin(catalog.admin.id)
    second = await catalog.service.promote_to_admin(catalog.admin.id)
    assert first == second == {"success": False, "message": "User is already an admin"}
    assert catalog.users.writes == []


async def test_promote_never_demotes_superadmin(catalog):
    out = await catalog.service.promote_to_admin(catalog.superadmin.id)
    assert out["success"] is False
    assert out["message"] == "User already has superadmin privileges"
    assert catalog.superadmin.role is UserRole.SUPERADMIN
    assert catalog.users.writes == []


async def test_promote_unknown_user_is_not_found(catalog):
    with pytest.raises(NotFound):
        await catalog.service.promote_to_admin(uuid.uuid4())
