"""
Idempotency policy: how long attempts live and what a concurrent retry does.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum, auto


class OnPending(Enum):
    """
    A call arrives while another attempt for the same key is in flight.

    WAIT: poll until the attempt settles and replay its outcome.
    FAIL: return CONFLICT immediately.
    """

    WAIT = auto()
    FAIL = auto()


WAIT = OnPending.WAIT
FAIL = OnPending.FAIL


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Example:
        policy = (
            Policy()
            .with_ttl(hours=24)
            .with_on_pending(FAIL)
        )

    Note: Immutable: each method returns a new Policy.
    """

    ttl: timedelta | None = None
    on_pending: OnPending = OnPending.WAIT
    wait_timeout: timedelta = timedelta(seconds=30)
    poll_interval: timedelta = timedelta(milliseconds=100)
    # Failures are forgotten by default so the caller may retry.
    persist_failed: bool = False

    def with_ttl(
        self,
        *,
        seconds: float | None = None,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        """
        Lifetime of a settled record; after it the key may run again.

        Example:
            .with_ttl(hours=24)
            .with_ttl(delta=timedelta(days=7))
        """
        if delta is not None:
            return replace(self, ttl=delta)
        if seconds is None and hours is None:
            return replace(self, ttl=None)
        return replace(self, ttl=timedelta(seconds=seconds or 0, hours=hours or 0))

    def with_on_pending(self, strategy: OnPending) -> Policy:
        return replace(self, on_pending=strategy)

    def with_wait_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> Policy:
        """Only used with WAIT."""
        if delta is not None:
            return replace(self, wait_timeout=delta)
        if seconds is not None:
            return replace(self, wait_timeout=timedelta(seconds=seconds))
        return self

    def with_poll_interval(self, *, seconds: float) -> Policy:
        return replace(self, poll_interval=timedelta(seconds=seconds))

    def with_persist_failed(self, persist: bool = True) -> Policy:
        """
        Keep failed attempts so a retry replays the failure.

        Example:
            .with_persist_failed()  # a declined order stays declined
        """
        return replace(self, persist_failed=persist)


__all__ = ("OnPending", "WAIT", "FAIL", "Policy")
