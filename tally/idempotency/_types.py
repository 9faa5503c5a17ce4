"""
Idempotency types: attempt records and outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum, auto
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


# ═══════════════════════════════════════════════════════════════════════════════
# Record
# ═══════════════════════════════════════════════════════════════════════════════


class RecordState(Enum):
    """
    Lifecycle of one keyed attempt.

        PENDING → COMPLETED  (operation returned Ok)
                → FAILED     (operation returned Error, kept only if the
                              policy persists failures)
                → deleted    (failure not persisted, crash, or cancellation)
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


def expires_in(ttl: timedelta | None) -> datetime | None:
    """Expiry for a record written now; None lives forever."""
    return datetime.now() + ttl if ttl is not None else None


@dataclass(frozen=True, slots=True)
class IdempotencyRecord(Generic[T, E]):
    """
    What the store remembers about a key.

    fingerprint: digest of the input that claimed the key. A later call
    with the same key but a different fingerprint is a collision, not a
    retry.
    """

    key: str
    state: RecordState
    value: T | None
    error: E | None
    created_at: datetime
    expires_at: datetime | None
    fingerprint: str | None = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and datetime.now() > self.expires_at

    @classmethod
    def claimed(
        cls,
        key: str,
        ttl: timedelta | None,
        fingerprint: str | None = None,
    ) -> IdempotencyRecord[T, E]:
        return cls(
            key=key,
            state=RecordState.PENDING,
            value=None,
            error=None,
            created_at=datetime.now(),
            expires_at=expires_in(ttl),
            fingerprint=fingerprint,
        )

    def settled(
        self,
        state: RecordState,
        *,
        value: T | None = None,
        error: E | None = None,
        ttl: timedelta | None = None,
    ) -> IdempotencyRecord[T, E]:
        """The same claim, now COMPLETED or FAILED; the TTL restarts."""
        return replace(self, state=state, value=value, error=error, expires_at=expires_in(ttl))


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IdempotencyResult(Generic[T]):
    """`replayed` is True when the value came from the store, not a fresh run."""

    value: T
    replayed: bool
    key: str


class IdempotencyErrorKind(Enum):
    CONFLICT = auto()  # another attempt for the key is in flight
    TIMEOUT = auto()  # gave up waiting for the in-flight attempt
    STORE_ERROR = auto()
    EXECUTION = auto()  # the guarded operation failed
    FINGERPRINT_MISMATCH = auto()  # key reused with a different input


@dataclass(frozen=True, slots=True)
class IdempotencyError(Generic[E]):
    """`cause` holds the operation's own error for EXECUTION."""

    kind: IdempotencyErrorKind
    message: str
    cause: E | None = None


__all__ = (
    "RecordState",
    "expires_in",
    "IdempotencyRecord",
    "IdempotencyResult",
    "IdempotencyErrorKind",
    "IdempotencyError",
)
