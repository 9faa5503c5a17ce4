"""
Idempotency builder: fluent API over the graph.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from kungfu import LazyCoroResult, Ok, Result

from tally.idempotency._graph import AttemptSpec, run_guarded
from tally.idempotency._policy import Policy
from tally.idempotency._store import MemoryStore, StoreAny
from tally.idempotency._types import IdempotencyError, IdempotencyResult

type KeyFn[K] = Callable[[K], str]


@dataclass(slots=True, frozen=True)
class Idempotent[K, T, E]:
    _operation: Callable[[K], LazyCoroResult[T, E]]
    _key_fn: KeyFn[K] | None = None
    _fingerprint_fn: KeyFn[K] | None = None
    _store: StoreAny | None = None
    _policy: Policy = Policy()

    def key(self, fn: KeyFn[K]) -> Idempotent[K, T, E]:
        return replace(self, _key_fn=fn)

    def fingerprint(self, fn: KeyFn[K]) -> Idempotent[K, T, E]:
        """Digest of the input; a reused key with another digest is rejected."""
        return replace(self, _fingerprint_fn=fn)

    def store(self, s: StoreAny) -> Idempotent[K, T, E]:
        return replace(self, _store=s)

    def policy(self, p: Policy) -> Idempotent[K, T, E]:
        return replace(self, _policy=p)

    def build(self) -> IdempotentExecutor[K, T, E]:
        if self._key_fn is None:
            raise ValueError("key() is required")
        return IdempotentExecutor(
            operation=self._operation,
            key_fn=self._key_fn,
            fingerprint_fn=self._fingerprint_fn,
            store=self._store if self._store is not None else MemoryStore(),
            policy=self._policy,
        )


@dataclass(slots=True, frozen=True)
class IdempotentExecutor[K, T, E]:
    operation: Callable[[K], LazyCoroResult[T, E]]
    key_fn: KeyFn[K]
    fingerprint_fn: KeyFn[K] | None
    store: StoreAny
    policy: Policy

    def run(self, input_val: K) -> LazyCoroResult[IdempotencyResult[T], IdempotencyError[E]]:
        spec = AttemptSpec(
            key=self.key_fn(input_val),
            input_value=input_val,
            operation=self.operation,
            store=self.store,
            policy=self.policy,
            fingerprint=self.fingerprint_fn(input_val) if self.fingerprint_fn else None,
        )

        async def execute() -> Result[IdempotencyResult[T], IdempotencyError[E]]:
            return await run_guarded(spec)

        return LazyCoroResult(execute)

    async def forget(self, input_val: K) -> bool:
        """Drop the record for this input so it can run again."""
        result = await self.store.release(self.key_fn(input_val))
        match result:
            case Ok(existed):
                return existed
            case _:
                return False


def idempotent[K, T, E](operation: Callable[[K], LazyCoroResult[T, E]]) -> Idempotent[K, T, E]:
    """
    Wrap an operation so each key runs at most once.

    Example:
        executor = (
            I.idempotent(submit_payment)
            .key(lambda req: f"payment:{req.order_id}")
            .store(I.MemoryStore())
            .policy(I.Policy().with_ttl(hours=24))
            .build()
        )

        result = await executor.run(request)
    """
    return Idempotent(_operation=operation)


__all__ = ("Idempotent", "IdempotentExecutor", "idempotent")
