# app/middleware/request_id.py
from __future__ import annotations

"""
# KinoAdmin — Request ID Middleware (pure ASGI)

- Reuses a client-supplied `X-Request-ID` / `X-Correlation-ID` when it is a valid UUIDv4.
- Generates a UUIDv4 otherwise.
- Injects it into `request.state.request_id` (read by the error handlers) and
  echoes it on the response.
- Binds `request_id` into the **loguru** context for the request's lifetime.

## Env / Config
- `REQUEST_ID_HEADER_NAME` (default: `X-Request-ID`)
- `REQUEST_ID_TRUST_CLIENT_IDS` ("true"/"false"; default: "true")
"""

import os
import uuid
from typing import Optional

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send


# ─────────────────────────────────────────────────────────────
# ⚙️ Config
# ─────────────────────────────────────────────────────────────

HEADER_NAME = os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID")
TRUST_CLIENT_IDS = os.getenv("REQUEST_ID_TRUST_CLIENT_IDS", "true").lower() == "true"
MAX_ID_LENGTH = 64


def _valid_uuid4(candidate: str) -> Optional[str]:
    if not candidate or len(candidate) > MAX_ID_LENGTH:
        return None
    try:
        val = uuid.UUID(candidate)
    except ValueError:
        return None
    return str(val) if val.version == 4 else None


class RequestIDMiddleware:
    """Per-request correlation id, visible to handlers, logs and the client."""

    def __init__(self, app: ASGIApp, header_name: str = HEADER_NAME) -> None:
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = self._choose_request_id(Headers(scope=scope))
        scope.setdefault("state", {})["request_id"] = req_id
        name_bytes = self.header_name.lower().encode("latin-1")

        async def _send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers = [(k, v) for (k, v) in message.get("headers", []) if k.lower() != name_bytes]
                headers.append((name_bytes, req_id.encode("latin-1")))
                message["headers"] = headers
            await send(message)

        with logger.contextualize(request_id=req_id):
            await self.app(scope, receive, _send_wrapper)

    def _choose_request_id(self, headers: Headers) -> str:
        if TRUST_CLIENT_IDS:
            incoming = headers.get(self.header_name) or headers.get("X-Correlation-ID")
            valid = _valid_uuid4((incoming or "").strip())
            if valid:
                return valid
        return str(uuid.uuid4())


__all__ = ["RequestIDMiddleware"]
