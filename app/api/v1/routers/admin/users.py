from __future__ import annotations

"""
👤 KinoAdmin · Admin Users API

- POST /users/{user_id}/promote → grant the `admin` role

The catalog service's promote operation carries no gate of its own; this route
applies `promoter_identity` (superadmins only unless
`PROMOTE_REQUIRES_SUPERADMIN=false`). Promoting an existing admin or a
superadmin is acknowledged with `success: false` and leaves the role alone.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.http_utils import json_no_store
from app.dependencies.admin import AuthorizedIdentity, promoter_identity
from app.dependencies.catalog import get_catalog_service
from app.services.admin_catalog_service import AdminCatalogService

router = APIRouter(tags=["Admin Users"])
logger = logging.getLogger("catalog")


@router.post("/users/{user_id}/promote", summary="Promote a user to admin")
async def promote_user(
    user_id: str,
    identity: AuthorizedIdentity = Depends(promoter_identity),
    service: AdminCatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    result = await service.promote_to_admin(user_id)
    if result.get("success"):
        logger.info(f"Promotion of {user_id} requested by {identity.user_id}")
    return json_no_store(result)


__all__ = ["router"]
