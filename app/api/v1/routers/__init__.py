"""
🧭✨ KinoAdmin • API v1 Router Aggregator
========================================

Exports both the **combined `router`** (ready to include) and the admin
sub-router so callers can mount them as needed.

Quick usage
-----------
    from app.api.v1.routers import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")

Security notes
--------------
- 🔐 This layer is a pure aggregator; **auth lives in child routers / the catalog service**.
- 🧊 Child routers set `no-store` on their responses; that is preserved here.
"""

from fastapi import APIRouter

from .admin import router as admin_router


# ─────────────────────────────────────────────────────────────────────────────
# 🧩 Factory: build a combined v1 router with stable path layout
# ─────────────────────────────────────────────────────────────────────────────
def build_v1_router() -> APIRouter:
    """
    Compose the API v1 surface into a single `APIRouter`.

    Returns
    -------
    fastapi.APIRouter
        A router that includes the admin endpoints under `/admin`.
    """
    r = APIRouter()
    r.include_router(admin_router, prefix="/admin")
    return r


router = build_v1_router()


__all__ = [
    "router",
    "build_v1_router",
    "admin_router",
]
