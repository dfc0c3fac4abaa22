"""
Module: rentbook_kernel.db.base
Responsibility: Declarative base for the ledger tables the reporting engine
    reads.  Fixes column conventions (UUID keys stored as strings, cents as
    BigInteger, aware timestamps) and the business scope every table shares.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel.  MUST NOT import from models/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Every row has a uuid4 primary key.
    - Monetary columns are integer cents; floats never reach the ledger.
    - Every ledger table carries business_id; selectors filter on it first.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID bound as its 36-character text form so SQLite and PostgreSQL agree."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` plus the column type map."""

    type_annotation_map: ClassVar[dict] = {
        UUID: UUIDString(),
        int: BigInteger,
        datetime: DateTime(timezone=True),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class BusinessScopedBase(Base):
    """
    Abstract base for tables owned by one business.

    ``created_at`` is stamped by the database and is row metadata only; no
    report reads it.
    """

    __abstract__ = True

    business_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
