"""Database layer for the rentbook kernel."""

from rentbook_kernel.db.base import Base, BusinessScopedBase, UUIDString
from rentbook_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
)

__all__ = [
    "Base",
    "BusinessScopedBase",
    "UUIDString",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "create_tables",
    "drop_tables",
    "reset_engine",
]
