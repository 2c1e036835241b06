# tests/conftest.py
"""
Global test bootstrap
- Sets the environment `app.core.config.Settings` needs BEFORE anything from
  `app` is imported (signing secret, throwaway upload directory)
- Mounts a mock Redis client into app.core.redis_client
- Pulls in the shared fixtures (tokens, in-memory repositories, storage)
"""

from __future__ import annotations

import os
import tempfile

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set before importing the app)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-kinoadmin-suite")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("ENV", "development")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="kinoadmin-uploads-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

# ──────────────────────────────────────────────────────────────────────────────
# 🧪 Install mock Redis globally before any tests run
# ──────────────────────────────────────────────────────────────────────────────
from app.core.redis_client import redis_wrapper
from tests.fixtures.mocks.redis import MockRedisClient

redis_wrapper._client = MockRedisClient()

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Pull in the rest of the fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.tokens import *      # noqa: F401,F403,E402
from tests.fixtures.repos import *       # noqa: F401,F403,E402


# ──────────────────────────────────────────────────────────────────────────────
# 🔌 Redis fixture (function-scoped), cleared between tests
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
async def redis_client():
    """The mock client behind `redis_wrapper`, emptied before and after the test."""
    client = redis_wrapper.client
    await client.flushall()
    yield client
    await client.flushall()
