"""Database layer - engine, base classes, and column types."""

from darkpool_kernel.db.base import UUID, Base, UUIDString
from darkpool_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session_factory,
    init_engine_from_url,
)
from darkpool_kernel.db.types import DecimalString, UTCDateTime, round_money

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session_factory",
    "create_tables",
    "Base",
    "UUIDString",
    "UUID",
    "DecimalString",
    "UTCDateTime",
    "round_money",
]
