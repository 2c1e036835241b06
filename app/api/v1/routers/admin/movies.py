from __future__ import annotations

"""
🎬 KinoAdmin · Admin Movies API
==============================

Catalog management for admins. Every route reads the session token from the
cookie store and hands it to the catalog service, whose guarded methods run
the authorization gate before anything else.

Routes (mounted under `/api/v1/admin`)
-------------------------------------
- GET    /movies                      → list movies (newest first, review counts)
- POST   /movies                      → create movie (multipart, `poster` file)
- PATCH  /movies/{movie_id}           → partial update (JSON)
- DELETE /movies/{movie_id}           → delete movie
- POST   /movies/{movie_id}/files     → attach a video file (multipart, `file`)

Form fields are accepted as plain strings and validated by the service, so a
bad value is a 400 with the usual error envelope rather than a 422. All
responses are `no-store`.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from app.api.http_utils import json_no_store
from app.core.jwt import get_session_token
from app.dependencies.catalog import get_catalog_service
from app.services.admin_catalog_service import AdminCatalogService

router = APIRouter(tags=["Admin Movies"])


def _form_payload(**fields: Optional[str]) -> Dict[str, Any]:
    """Drop absent form fields so the input model reports them as missing."""
    return {k: v for k, v in fields.items() if v is not None}


# ─────────────────────────────────────────────────────────────────────────────
# 📜 List
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/movies", summary="List movies with review counts")
async def list_movies(
    token: Optional[str] = Depends(get_session_token),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    return json_no_store(await service.list_movies(token))


# ─────────────────────────────────────────────────────────────────────────────
# ➕ Create
# ─────────────────────────────────────────────────────────────────────────────
@router.post("/movies", summary="Create a movie with a poster", status_code=201)
async def create_movie(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    release_year: Optional[str] = Form(None),
    duration_minutes: Optional[str] = Form(None),
    subscription_type: Optional[str] = Form(None),
    poster: Optional[UploadFile] = File(None),
    token: Optional[str] = Depends(get_session_token),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    payload = _form_payload(
        title=title,
        description=description,
        release_year=release_year,
        duration_minutes=duration_minutes,
        subscription_type=subscription_type,
    )
    result = await service.create_movie(token, payload, poster)
    return json_no_store(result, status_code=201)


# ─────────────────────────────────────────────────────────────────────────────
# ✏️ Update
# ─────────────────────────────────────────────────────────────────────────────
@router.patch("/movies/{movie_id}", summary="Update movie fields")
async def update_movie(
    movie_id: str,
    payload: Optional[Dict[str, Any]] = Body(None),
    token: Optional[str] = Depends(get_session_token),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    return json_no_store(await service.update_movie(token, movie_id, payload or {}))


# ─────────────────────────────────────────────────────────────────────────────
# 🗑️ Delete
# ─────────────────────────────────────────────────────────────────────────────
@router.delete("/movies/{movie_id}", summary="Delete a movie")
async def delete_movie(
    movie_id: str,
    token: Optional[str] = Depends(get_session_token),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    return json_no_store(await service.delete_movie(token, movie_id))


# ─────────────────────────────────────────────────────────────────────────────
# 🎞️ Attach video file
# ─────────────────────────────────────────────────────────────────────────────
@router.post("/movies/{movie_id}/files", summary="Attach a video file to a movie", status_code=201)
async def upload_movie_file(
    movie_id: str,
    quality: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    token: Optional[str] = Depends(get_session_token),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    payload = _form_payload(quality=quality, language=language)
    result = await service.upload_movie_file(token, movie_id, file, payload)
    return json_no_store(result, status_code=201)


__all__ = ["router"]
