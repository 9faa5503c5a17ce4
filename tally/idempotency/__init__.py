"""
Idempotency: run a keyed operation at most once.

    from tally import idempotency as I

    executor = (
        I.idempotent(submit_payment)
        .key(lambda req: f"payment:{req.order_id}")
        .fingerprint(lambda req: f"{to_cents(req.amount)}:{req.payment_method_id}")
        .store(I.MemoryStore())
        .policy(I.Policy().with_ttl(hours=24).with_on_pending(I.FAIL))
        .build()
    )
    result = await executor.run(request)   # Ok(IdempotencyResult(value, replayed, key))

A second run with the same key replays the stored value instead of calling
the operation again. The outcome is routed by a nodnod graph (see _graph).
"""

from tally.idempotency._types import (
    RecordState,
    expires_in,
    IdempotencyRecord,
    IdempotencyResult,
    IdempotencyError,
    IdempotencyErrorKind,
)
from tally.idempotency._store import (
    Store,
    StoreAny,
    StoreError,
    MemoryStore,
)
from tally.idempotency._policy import (
    Policy,
    OnPending,
    WAIT,
    FAIL,
)
from tally.idempotency._graph import (
    AttemptSpec,
    run_guarded,
)
from tally.idempotency._builder import (
    idempotent,
    Idempotent,
    IdempotentExecutor,
)

__all__ = (
    # Types
    "RecordState",
    "expires_in",
    "IdempotencyRecord",
    "IdempotencyResult",
    "IdempotencyError",
    "IdempotencyErrorKind",
    # Store
    "Store",
    "StoreAny",
    "StoreError",
    "MemoryStore",
    # Policy
    "Policy",
    "OnPending",
    "WAIT",
    "FAIL",
    # Graph
    "AttemptSpec",
    "run_guarded",
    # Builder
    "idempotent",
    "Idempotent",
    "IdempotentExecutor",
)
