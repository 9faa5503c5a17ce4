"""
Idempotency store: the protocol a backend implements, plus an in-memory one.

Every method returns a Result; backends never raise for expected failures.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, Protocol, TypeVar

from kungfu import Error, Ok, Result

from tally.idempotency._types import IdempotencyRecord, RecordState

T = TypeVar("T")


@dataclass(frozen=True)
class StoreError:
    message: str
    cause: Exception | None = None


class Store(Protocol[T]):
    """
    Backend for keyed attempts.

    `claim` is the only operation that must be atomic: of two concurrent
    claims for one key exactly one gets Ok(True).
    """

    async def get(self, key: str) -> Result[IdempotencyRecord[T, Any] | None, StoreError]:
        """Ok(None) when the key is unknown or its record expired."""
        ...

    async def claim(
        self,
        key: str,
        ttl: timedelta | None,
        fingerprint: str | None = None,
    ) -> Result[bool, StoreError]:
        """Create a PENDING record; Ok(False) if a live one exists."""
        ...

    async def complete(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        ...

    async def fail(self, key: str, error: Any, ttl: timedelta | None) -> Result[None, StoreError]:
        ...

    async def release(self, key: str) -> Result[bool, StoreError]:
        """Delete the record. Ok(True) if one existed."""
        ...


type StoreAny = Store[Any]


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStore(Generic[T]):
    """
    Process-local store guarded by an asyncio.Lock.

    Note: single process only; records do not survive a restart.
    """

    def __init__(self) -> None:
        self._records: dict[str, IdempotencyRecord[T, Any]] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> IdempotencyRecord[T, Any] | None:
        record = self._records.get(key)
        if record is not None and record.is_expired:
            del self._records[key]
            return None
        return record

    async def get(self, key: str) -> Result[IdempotencyRecord[T, Any] | None, StoreError]:
        async with self._lock:
            return Ok(self._live(key))

    async def claim(
        self,
        key: str,
        ttl: timedelta | None,
        fingerprint: str | None = None,
    ) -> Result[bool, StoreError]:
        async with self._lock:
            if self._live(key) is not None:
                return Ok(False)
            self._records[key] = IdempotencyRecord.claimed(key, ttl, fingerprint)
            return Ok(True)

    async def complete(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        async with self._lock:
            record = self._records.get(key)
            if record is None:
                return Error(StoreError(f"No pending record for key: {key}"))
            self._records[key] = record.settled(RecordState.COMPLETED, value=value, ttl=ttl)
            return Ok(None)

    async def fail(self, key: str, error: Any, ttl: timedelta | None) -> Result[None, StoreError]:
        async with self._lock:
            record = self._records.get(key)
            if record is None:
                return Error(StoreError(f"No pending record for key: {key}"))
            self._records[key] = record.settled(RecordState.FAILED, error=error, ttl=ttl)
            return Ok(None)

    async def release(self, key: str) -> Result[bool, StoreError]:
        async with self._lock:
            return Ok(self._records.pop(key, None) is not None)


__all__ = ("StoreError", "Store", "StoreAny", "MemoryStore")
