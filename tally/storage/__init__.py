"""
Storage: the save/load boundary, on SQLAlchemy async with aiosqlite.

    from tally import storage as DB

    sessions, engine = await DB.create_database()
    orders = DB.OrderRepository(sessions)
    attempts = DB.SQLAttemptStore(sessions)   # PaymentResult values

    await orders.save(order)
    loaded = await orders.load(order.id)   # Ok(Order | None)
"""

from tally.storage._tables import (
    Base,
    OrderRow,
    PaymentAttemptRow,
    create_database,
)
from tally.storage._orders import (
    StorageError,
    OrderRepository,
)
from tally.storage._attempts import (
    SQLAttemptStore,
)

__all__ = (
    # Tables
    "Base",
    "OrderRow",
    "PaymentAttemptRow",
    "create_database",
    # Orders
    "StorageError",
    "OrderRepository",
    # Attempts
    "SQLAttemptStore",
)
