"""
Module: housing_kernel.models.sequence
Responsibility: Named monotonic counters backing application and
    registration numbers.
Architecture position: Kernel > Models.  Written only by SequenceService.

Invariants enforced:
    - One row per sequence name (uq_sequence_counters_name).
    - Values are issued by incrementing the locked row, never by
      MAX(number) + 1 over the numbered table.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from housing_kernel.db.base import Base


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence with its current value.
    """

    __tablename__ = "sequence_counters"

    __table_args__ = (
        UniqueConstraint("name", name="uq_sequence_counters_name"),
    )

    # Sequence name ("application", "registration")
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    # Last issued value; 0 means nothing issued yet
    current_value: Mapped[int] = mapped_column(nullable=False, default=0)
