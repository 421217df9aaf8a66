"""
Module: housing_kernel.db.base
Responsibility: Declarative base for the housing ORM models: UUID surrogate
    keys, a constraint naming convention, row-change timestamps and the
    helper that turns a closed set of status strings into a CHECK constraint.
Architecture position: Kernel > DB.  Lowest-level import target in the
    kernel.  MUST NOT import from models/, services/, selectors/ or domain/,
    so status values are passed in as plain strings.

Invariants enforced:
    - Surrogate keys are uuid4 and never shown to users.  Application and
      registration numbers come from SequenceService.
    - Unnamed keys and indexes get deterministic names, so SQLite and
      PostgreSQL report the same constraint in IntegrityError messages.
      CHECK constraints are always named explicitly.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, MetaData, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
}


class UUIDString(TypeDecorator):
    """UUID kept as its 36-character text form; SQLite has no UUID type."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    """Declarative base; every table gets a uuid4 ``id``."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Adds ``updated_at``, refreshed by the database on every UPDATE.

    Lifecycle dates that carry meaning (submission, review) are separate
    columns written from the injected clock; this one only marks row changes.
    """

    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


def one_of(column: str, values: Iterable[str], name: str) -> CheckConstraint:
    """CHECK that ``column`` holds one of ``values``."""
    quoted = ", ".join(f"'{v}'" for v in values)
    return CheckConstraint(f"{column} IN ({quoted})", name=name)
