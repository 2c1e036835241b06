# app/core/redis_client.py
from __future__ import annotations

"""
KinoAdmin — Redis Client (Async)
================================
Single source of truth for Redis access. The admin surface only needs Redis
for one thing: the session **revocation lane** consulted while verifying a
session token (`revoked:jti:{jti}`).

Public API (imported as `redis_wrapper`)
----------------------------------------
- await redis_wrapper.connect() / await redis_wrapper.close()
- await redis_wrapper.is_connected()
- redis_wrapper.client   (None until connected; tests may assign a mock)
- await redis_wrapper.is_revoked(jti)

Design notes
------------
• Connect retries with exponential backoff + jitter.
• No client configured → nothing is revoked (dev/tests).
• Runtime errors bubble up; the caller decides fail-open vs fail-closed.
"""

import asyncio
import logging
import os
import random
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError as RedisTimeoutError

from app.core.config import settings

logger = logging.getLogger("redis")

# ─────────────────────────────────────────────────────────────────────────────
# Tunables (env-aware sensible defaults)
# ─────────────────────────────────────────────────────────────────────────────
MAX_RETRIES = int(os.getenv("REDIS_CONNECT_MAX_RETRIES", "5"))
BASE_DELAY = float(os.getenv("REDIS_CONNECT_BASE_DELAY", "0.3"))  # seconds
HEALTH_CHECK_INTERVAL = int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "30"))  # seconds
SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "3"))
SOCKET_CONNECT_TIMEOUT = float(os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "3"))
CLIENT_NAME = os.getenv("REDIS_CLIENT_NAME", "kinoadmin-api")

REVOKED_JTI_KEY = "revoked:jti:{jti}"


class RedisClient:
    """Async Redis connection manager (singleton via `redis_wrapper`)."""

    def __init__(self, url: Optional[str] = None) -> None:
        self._url = url or settings.REDIS_URL
        self._client: Optional[Any] = None

    # ── Lifecycle ──────────────────────────────────────────────────────────
    @property
    def client(self) -> Optional[Any]:
        return self._client

    async def connect(self) -> None:
        """Open a pooled client and PING it, retrying with backoff."""
        if self._client is not None:
            return
        last_exc: Optional[Exception] = None
        for attempt in range(1, MAX_RETRIES + 1):
            client = redis.from_url(
                self._url,
                decode_responses=True,
                socket_timeout=SOCKET_TIMEOUT,
                socket_connect_timeout=SOCKET_CONNECT_TIMEOUT,
                health_check_interval=HEALTH_CHECK_INTERVAL,
                client_name=CLIENT_NAME,
            )
            try:
                await client.ping()
                self._client = client
                logger.info("Redis connected (attempt %s)", attempt)
                return
            except (ConnectionError, RedisTimeoutError, OSError) as e:
                last_exc = e
                await client.close()
                delay = BASE_DELAY * (2 ** (attempt - 1)) + random.uniform(0, BASE_DELAY)
                logger.warning("Redis connect attempt %s/%s failed: %s", attempt, MAX_RETRIES, e)
                await asyncio.sleep(delay)
        raise ConnectionError(f"Could not connect to Redis after {MAX_RETRIES} attempts: {last_exc}")

    async def close(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.close()
        finally:
            self._client = None

    async def is_connected(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    # ── Revocation lane ────────────────────────────────────────────────────
    async def is_revoked(self, jti: str) -> bool:
        """Return True if `revoked:jti:{jti}` is set. No client → False."""
        rc = self._client
        if rc is None:
            return False
        return bool(await rc.exists(REVOKED_JTI_KEY.format(jti=jti)))


redis_wrapper = RedisClient()

__all__ = ["RedisClient", "redis_wrapper", "REVOKED_JTI_KEY"]
