from __future__ import annotations

"""
KinoAdmin · HTTP Utilities
==========================

Shared helpers for API routers:

- No-store JSON helper for sensitive (admin) responses
"""

from typing import Any, Optional

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

__all__ = ["json_no_store"]


# ─────────────────────────────────────────────────────────────────────────────
# 🧳 No-store JSON helper (sensitive responses)
# ─────────────────────────────────────────────────────────────────────────────

def json_no_store(
    payload: Any,
    status_code: int = 200,
    *,
    response: Optional[Response] = None,
) -> JSONResponse:
    """
    Return a JSON response with strict `no-store` caching.

    UUIDs, datetimes and Pydantic models in `payload` are encoded with
    `jsonable_encoder`. Propagates `Location` from an upstream Response if
    supplied.
    """
    resp = JSONResponse(content=jsonable_encoder(payload), status_code=status_code)
    resp.headers["Cache-Control"] = "no-store"
    resp.headers["Pragma"] = "no-cache"
    resp.headers["Expires"] = "0"

    if response is not None and "Location" in response.headers:
        resp.headers["Location"] = response.headers["Location"]
    return resp
