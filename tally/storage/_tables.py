"""
Database layer: SQLAlchemy tables for placed orders and payment attempts.

Only the fields the pricing core reads and writes are persisted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

MONEY = Numeric(12, 2)


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    shipping_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    payment_fee: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    transaction_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Payment attempts
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentAttemptRow(Base):
    """
    One keyed payment submission.

    state: "pending" | "completed" | "failed"
    value: JSON of the recorded PaymentResult once completed.
    error: JSON of the recorded PaymentError once failed.
    """

    __tablename__ = "payment_attempts"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    fingerprint: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """
    Create tables and return (session_factory, engine).

    Any async SQLAlchemy URL works; nothing here is SQLite-specific.
    """
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = ("Base", "OrderRow", "PaymentAttemptRow", "create_database")
