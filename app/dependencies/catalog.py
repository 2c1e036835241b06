from __future__ import annotations

"""FastAPI dependency wiring the admin catalog service onto the request's DB session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_async_db
from app.dependencies.admin import AuthorizationGate
from app.repositories.movies import SqlMovieRepository
from app.repositories.users import SqlUserRepository
from app.services.admin_catalog_service import AdminCatalogService


async def get_catalog_service(db: AsyncSession = Depends(get_async_db)) -> AdminCatalogService:
    users = SqlUserRepository(db)
    return AdminCatalogService(
        movies=SqlMovieRepository(db),
        users=users,
        gate=AuthorizationGate(users),
    )


__all__ = ["get_catalog_service"]
