"""
SQL-backed store for payment attempts.

Recorded results and failures are serialized with pydantic TypeAdapters,
so a PaymentResult or PaymentError comes back as the same dataclass after
a restart.

Usage:
    sessions, engine = await create_database("sqlite+aiosqlite:///tally.db")
    processor = PaymentProcessor(store=SQLAttemptStore(sessions))
"""

from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from kungfu import Error, Ok, Result
from pydantic import TypeAdapter
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tally.idempotency import IdempotencyRecord, RecordState, StoreError, expires_in
from tally.payments import PaymentError, PaymentResult
from tally.storage._tables import PaymentAttemptRow

T = TypeVar("T")


class SQLAttemptStore(Generic[T]):
    """
    Store implementation over the payment_attempts table.

    `claim` relies on the primary key alone: of two concurrent inserts for
    one key the database rejects the second, which is reported as Ok(False).
    Works on any SQLAlchemy dialect with an async driver.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        value_type: type[T] = PaymentResult,  # type: ignore[assignment]
        error_type: type[Any] = PaymentError,
    ) -> None:
        self._session_factory = session_factory
        self._values: TypeAdapter[T] = TypeAdapter(value_type)
        self._errors: TypeAdapter[Any] = TypeAdapter(error_type)

    async def _row(self, session: AsyncSession, key: str) -> PaymentAttemptRow | None:
        result = await session.execute(select(PaymentAttemptRow).where(PaymentAttemptRow.key == key))
        return result.scalar_one_or_none()

    async def get(self, key: str) -> Result[IdempotencyRecord[T, Any] | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await self._row(session, key)
                if row is None:
                    return Ok(None)
                record = self._to_record(row)
                return Ok(None if record.is_expired else record)
        except Exception as e:
            return Error(StoreError(f"Failed to get: {e}", e))

    async def claim(
        self,
        key: str,
        ttl: timedelta | None,
        fingerprint: str | None = None,
    ) -> Result[bool, StoreError]:
        claim = IdempotencyRecord.claimed(key, ttl, fingerprint)
        try:
            async with self._session_factory() as session:
                # An expired row no longer holds the key.
                await session.execute(
                    delete(PaymentAttemptRow).where(
                        PaymentAttemptRow.key == key,
                        PaymentAttemptRow.expires_at.is_not(None),
                        PaymentAttemptRow.expires_at < datetime.now(),
                    )
                )
                session.add(
                    PaymentAttemptRow(
                        key=claim.key,
                        state=claim.state.value,
                        fingerprint=claim.fingerprint,
                        created_at=claim.created_at,
                        expires_at=claim.expires_at,
                    )
                )
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return Ok(False)
                return Ok(True)
        except Exception as e:
            return Error(StoreError(f"Failed to claim: {e}", e))

    async def _settle(
        self,
        key: str,
        state: RecordState,
        value: str | None,
        error: str | None,
        ttl: timedelta | None,
    ) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await self._row(session, key)
                if row is None:
                    return Error(StoreError(f"Record not found: {key}"))
                row.state = state.value
                row.value = value
                row.error = error
                row.expires_at = expires_in(ttl)
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StoreError(f"Failed to settle: {e}", e))

    async def complete(self, key: str, value: T, ttl: timedelta | None) -> Result[None, StoreError]:
        encoded = self._values.dump_json(value).decode()
        return await self._settle(key, RecordState.COMPLETED, encoded, None, ttl)

    async def fail(self, key: str, error: Any, ttl: timedelta | None) -> Result[None, StoreError]:
        encoded = self._errors.dump_json(error).decode()
        return await self._settle(key, RecordState.FAILED, None, encoded, ttl)

    async def release(self, key: str) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                cursor = await session.execute(
                    delete(PaymentAttemptRow).where(PaymentAttemptRow.key == key)
                )
                await session.commit()
                return Ok(cursor.rowcount > 0)
        except Exception as e:
            return Error(StoreError(f"Failed to release: {e}", e))

    def _to_record(self, row: PaymentAttemptRow) -> IdempotencyRecord[T, Any]:
        return IdempotencyRecord(
            key=row.key,
            state=RecordState(row.state),
            value=self._values.validate_json(row.value) if row.value is not None else None,
            error=self._errors.validate_json(row.error) if row.error is not None else None,
            created_at=row.created_at,
            expires_at=row.expires_at,
            fingerprint=row.fingerprint,
        )


__all__ = ("SQLAttemptStore",)
