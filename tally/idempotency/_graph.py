"""
Idempotency graph: record state decides, polymorphic routing acts.

    AttemptSpec (injected)
         │
         ▼
    LookupNode ─┬─ StoreFailureNode ──┐
                ├─ MismatchNode ──────┤
                ├─ SettledNode ───────┤
                ├─ FailedNode ────────┼── AttemptOutcome (@polymorphic)
                ├─ InFlightNode ──────┤            │
                └─ VacantNode ────────┘            ▼
                                            FinalResultNode

Each state node raises NodeError unless the looked-up record is in its
state, so exactly one outcome case survives.

Note: no `from __future__ import annotations` here, nodnod reads the
`__compose__` type hints at runtime.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from kungfu import Error, Ok, Result
from nodnod import NodeError, case, polymorphic

from tally import graph as G
from tally.idempotency._policy import OnPending, Policy
from tally.idempotency._store import StoreAny, StoreError
from tally.idempotency._types import (
    IdempotencyError,
    IdempotencyErrorKind,
    IdempotencyRecord,
    IdempotencyResult,
    RecordState,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptSpec:
    """
    Everything one guarded call needs.

    operation: callable returning an awaitable Result (a LazyCoroResult).
    """

    key: str
    input_value: Any
    operation: Any
    store: StoreAny
    policy: Policy
    fingerprint: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup & state nodes
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class LookupNode:
    def __init__(
        self,
        spec: AttemptSpec,
        record: IdempotencyRecord[Any, Any] | None,
        store_error: StoreError | None = None,
    ) -> None:
        self.spec = spec
        self.record = record
        self.store_error = store_error

    @classmethod
    async def __compose__(cls, spec: AttemptSpec) -> "LookupNode":
        result = await spec.store.get(spec.key)
        match result:
            case Ok(record):
                return cls(spec, record)
            case Error(err):
                return cls(spec, None, store_error=err)

    def record_in(self, state: RecordState) -> IdempotencyRecord[Any, Any]:
        """The live record, if it is in `state` and belongs to this input."""
        if self.store_error is not None:
            raise NodeError("Store error")
        record = self.record
        if record is None or record.is_expired:
            raise NodeError("No record")
        if record.state != state:
            raise NodeError(f"Not {state.name}")
        if _mismatched(self.spec, record):
            raise NodeError("Fingerprint mismatch")
        return record


def _mismatched(spec: AttemptSpec, record: IdempotencyRecord[Any, Any]) -> bool:
    return (
        spec.fingerprint is not None
        and record.fingerprint is not None
        and spec.fingerprint != record.fingerprint
    )


@G.node
class StoreFailureNode:
    def __init__(self, error: StoreError) -> None:
        self.error = error

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "StoreFailureNode":
        if lookup.store_error is None:
            raise NodeError("No store error")
        return cls(lookup.store_error)


@G.node
class MismatchNode:
    """A live record claimed by a different input under the same key."""

    def __init__(self, spec: AttemptSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "MismatchNode":
        record = lookup.record
        if record is None or record.is_expired or not _mismatched(lookup.spec, record):
            raise NodeError("No mismatch")
        return cls(lookup.spec)


@G.node
class SettledNode:
    def __init__(self, spec: AttemptSpec, record: IdempotencyRecord[Any, Any]) -> None:
        self.spec = spec
        self.record = record

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "SettledNode":
        return cls(lookup.spec, lookup.record_in(RecordState.COMPLETED))


@G.node
class FailedNode:
    def __init__(self, spec: AttemptSpec, record: IdempotencyRecord[Any, Any]) -> None:
        self.spec = spec
        self.record = record

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "FailedNode":
        return cls(lookup.spec, lookup.record_in(RecordState.FAILED))


@G.node
class InFlightNode:
    def __init__(self, spec: AttemptSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "InFlightNode":
        lookup.record_in(RecordState.PENDING)
        return cls(lookup.spec)


@G.node
class VacantNode:
    """No live record: the key is free to run."""

    def __init__(self, spec: AttemptSpec) -> None:
        self.spec = spec

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "VacantNode":
        if lookup.store_error is not None:
            raise NodeError("Store error")
        if lookup.record is not None and not lookup.record.is_expired:
            raise NodeError("Record exists")
        return cls(lookup.spec)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class OutcomeOk:
    value: Any
    replayed: bool
    key: str


@dataclass(frozen=True)
class OutcomeError:
    kind: IdempotencyErrorKind
    message: str
    cause: Any | None = None


type Outcome = OutcomeOk | OutcomeError


def _store_failure(err: StoreError) -> OutcomeError:
    return OutcomeError(IdempotencyErrorKind.STORE_ERROR, err.message, err.cause)


async def _run_claimed(spec: AttemptSpec) -> Outcome:
    """
    Run the operation for a key this call has claimed, then settle it.

    A cancelled call releases its claim before re-raising.
    """
    try:
        result: Result[Any, Any] = await spec.operation(spec.input_value)
    except asyncio.CancelledError:
        logger.info("Attempt %s abandoned, releasing claim", spec.key)
        await spec.store.release(spec.key)
        raise
    except Exception as e:
        await spec.store.release(spec.key)
        return OutcomeError(IdempotencyErrorKind.EXECUTION, str(e), e)

    match result:
        case Ok(value):
            stored = await spec.store.complete(spec.key, value, spec.policy.ttl)
            match stored:
                case Error(err):
                    return _store_failure(err)
                case Ok(_):
                    return OutcomeOk(value=value, replayed=False, key=spec.key)
        case Error(err):
            if spec.policy.persist_failed:
                await spec.store.fail(spec.key, err, spec.policy.ttl)
            else:
                await spec.store.release(spec.key)
            return OutcomeError(IdempotencyErrorKind.EXECUTION, "Operation returned Error", err)


async def _wait_for_settle(spec: AttemptSpec) -> Outcome:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + spec.policy.wait_timeout.total_seconds()
    interval = spec.policy.poll_interval.total_seconds()

    while loop.time() < deadline:
        await asyncio.sleep(interval)
        polled = await spec.store.get(spec.key)
        match polled:
            case Error(err):
                return _store_failure(err)
            case Ok(None):
                # Released: the other attempt failed or was abandoned.
                return OutcomeError(
                    IdempotencyErrorKind.CONFLICT,
                    f"Attempt {spec.key} was released while waiting",
                )
            case Ok(record) if record.state == RecordState.COMPLETED:
                return OutcomeOk(value=record.value, replayed=True, key=spec.key)
            case Ok(record) if record.state == RecordState.FAILED:
                return OutcomeError(
                    IdempotencyErrorKind.EXECUTION,
                    "Attempt failed while waiting",
                    record.error,
                )

    return OutcomeError(
        IdempotencyErrorKind.TIMEOUT,
        f"Timed out waiting for attempt {spec.key}",
    )


@polymorphic[Outcome]
class AttemptOutcome:
    @case
    def store_failure(cls, node: StoreFailureNode) -> Outcome:
        return _store_failure(node.error)

    @case
    def mismatch(cls, node: MismatchNode) -> Outcome:
        return OutcomeError(
            IdempotencyErrorKind.FINGERPRINT_MISMATCH,
            f"Key {node.spec.key} was already used with a different input",
        )

    @case
    def replay_completed(cls, node: SettledNode) -> Outcome:
        logger.info("Replaying settled attempt %s", node.spec.key)
        return OutcomeOk(value=node.record.value, replayed=True, key=node.spec.key)

    @case
    def replay_failed(cls, node: FailedNode) -> Outcome:
        return OutcomeError(IdempotencyErrorKind.EXECUTION, "Cached failure", node.record.error)

    @case
    def in_flight_conflict(cls, node: InFlightNode) -> Outcome:
        if node.spec.policy.on_pending != OnPending.FAIL:
            raise NodeError("Policy not FAIL")
        return OutcomeError(
            IdempotencyErrorKind.CONFLICT,
            f"Attempt {node.spec.key} is already in progress",
        )

    @case
    async def in_flight_wait(cls, node: InFlightNode) -> Outcome:
        if node.spec.policy.on_pending != OnPending.WAIT:
            raise NodeError("Policy not WAIT")
        return await _wait_for_settle(node.spec)

    @case
    async def run_fresh(cls, node: VacantNode) -> Outcome:
        spec = node.spec
        claimed = await spec.store.claim(spec.key, spec.policy.ttl, spec.fingerprint)
        match claimed:
            case Error(err):
                return _store_failure(err)
            case Ok(True):
                return await _run_claimed(spec)
            case Ok(_):
                pass

        # Lost the race for the claim.
        current = await spec.store.get(spec.key)
        match current:
            case Ok(record) if record is not None and record.state == RecordState.COMPLETED:
                return OutcomeOk(value=record.value, replayed=True, key=spec.key)
            case Ok(record) if (
                record is not None
                and record.state == RecordState.PENDING
                and spec.policy.on_pending == OnPending.WAIT
            ):
                return await _wait_for_settle(spec)
            case _:
                return OutcomeError(IdempotencyErrorKind.CONFLICT, "Race conflict")


# ═══════════════════════════════════════════════════════════════════════════════
# Final node & entry point
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class FinalResultNode:
    def __init__(self, outcome: Outcome) -> None:
        self.outcome = outcome

    @classmethod
    def __compose__(cls, outcome: AttemptOutcome) -> "FinalResultNode":
        return cls(outcome.value)

    def to_result(self) -> Result[IdempotencyResult[Any], IdempotencyError[Any]]:
        match self.outcome:
            case OutcomeOk(value=value, replayed=replayed, key=key):
                return Ok(IdempotencyResult(value=value, replayed=replayed, key=key))
            case OutcomeError(kind=kind, message=message, cause=cause):
                return Error(IdempotencyError(kind=kind, message=message, cause=cause))


async def run_guarded(spec: AttemptSpec) -> Result[IdempotencyResult[Any], IdempotencyError[Any]]:
    node = await G.compose(FinalResultNode, spec)
    return node.to_result()


__all__ = (
    "AttemptSpec",
    "LookupNode",
    "StoreFailureNode",
    "MismatchNode",
    "SettledNode",
    "FailedNode",
    "InFlightNode",
    "VacantNode",
    "Outcome",
    "OutcomeOk",
    "OutcomeError",
    "AttemptOutcome",
    "FinalResultNode",
    "run_guarded",
)
