from __future__ import annotations

"""
MockRedisClient (async) — test-grade, wrapper-compatible
========================================================
Covers the subset of Redis the app touches:

KV        : get/set/exists/delete
Health    : ping/close/flushall

`fail_with` makes every command raise, to exercise the fail-open / fail-closed
branches of the revocation check.
"""

import time
from typing import Any, Dict, Optional


class MockRedisClient:
    def __init__(self) -> None:
        self.store: Dict[str, Any] = {}
        self.expirations: Dict[str, Optional[float]] = {}
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _alive(self, key: str) -> bool:
        exp = self.expirations.get(key)
        if exp is not None and exp <= time.time():
            self.store.pop(key, None)
            self.expirations.pop(key, None)
        return key in self.store

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> Any:
        self._check()
        return self.store.get(key) if self._alive(key) else None

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self._check()
        self.store[key] = value
        self.expirations[key] = time.time() + ex if ex else None
        return True

    async def exists(self, *keys: str) -> int:
        self._check()
        return sum(1 for k in keys if self._alive(k))

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for k in keys:
            if self.store.pop(k, None) is not None:
                removed += 1
            self.expirations.pop(k, None)
        return removed

    async def flushall(self) -> bool:
        self.store.clear()
        self.expirations.clear()
        self.fail_with = None
        return True

    async def close(self) -> None:
        return None
