from __future__ import annotations

"""
Admin router package (v1)
=========================

Provides a consistent structure for admin endpoints by domain:
- movies (catalog + video files), users (promotion)

Design
------
• Each submodule defines its own `APIRouter` (with tags); authorization is
  applied by the catalog service gate or a route dependency.
• This package aggregates them into a single `router` export.
• Mount with a base path in your app:
    app.include_router(admin_v1.router, prefix="/api/v1/admin")

Notes
-----
• We add common 400/401/403/404 response docs at include-time for a uniform OpenAPI.
"""

# ─────────────────────────────────────────────────────────────────────────────
# 🧭 Imports
# ─────────────────────────────────────────────────────────────────────────────

from typing import Any, Dict

from fastapi import APIRouter, status

from .movies import router as movies_router
from .users import router as users_router


# ─────────────────────────────────────────────────────────────────────────────
# 📋 Common OpenAPI responses (docs-only; behavior unchanged)
# ─────────────────────────────────────────────────────────────────────────────

COMMON_ADMIN_RESPONSES: Dict[int, Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"description": "Invalid input"},
    status.HTTP_401_UNAUTHORIZED: {"description": "Missing, invalid or expired session"},
    status.HTTP_403_FORBIDDEN: {"description": "Role not allowed"},
    status.HTTP_404_NOT_FOUND: {"description": "Not found"},
}


# ─────────────────────────────────────────────────────────────────────────────
# 🧱 Default aggregated router
# ─────────────────────────────────────────────────────────────────────────────

router = APIRouter()  # callers mount with prefix="/api/v1/admin"

router.include_router(movies_router, responses=COMMON_ADMIN_RESPONSES)
router.include_router(users_router, responses=COMMON_ADMIN_RESPONSES)


__all__ = [
    "router",
    "movies_router",
    "users_router",
]
