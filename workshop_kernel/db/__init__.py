"""Database layer - engine, base classes and column types."""

from workshop_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from workshop_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from workshop_kernel.db.types import MoneyAmount, Percentage, QuantityAmount, UTCDateTime

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "MoneyAmount",
    "Percentage",
    "QuantityAmount",
    "UTCDateTime",
]
