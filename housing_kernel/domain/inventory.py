"""
Project inventory (``housing_kernel.domain.inventory``).

Responsibility
--------------
Bounded counters owned by a project: remaining units per flat type and the
number of free officer slots.  ``ProjectInventory`` is an immutable snapshot;
every operation validates its bound first and returns a new snapshot, so a
failed operation leaves nothing half-applied.

Architecture position
---------------------
**Kernel domain layer** -- pure value object.  ZERO I/O.  The only writer
of the persisted counters is ``services.inventory_service.InventoryService``,
which loads a snapshot, applies one of these operations and writes the
result back.

Invariants enforced
-------------------
* NON_NEGATIVE_QUOTA -- no flat-type quota is ever below zero.
* OFFICER_SLOT_BOUNDS -- ``0 <= officer_slots <= MAX_OFFICER_SLOTS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from housing_kernel.domain.values import FlatType
from housing_kernel.exceptions import (
    InsufficientInventoryError,
    InvalidArgumentError,
    NoSlotsAvailableError,
    SlotLimitExceededError,
)

MAX_OFFICER_SLOTS = 10


@dataclass(frozen=True)
class ProjectInventory:
    """Immutable inventory snapshot of one project."""

    project_name: str
    units: dict[FlatType, int] = field(default_factory=dict)
    officer_slots: int = 0

    def __post_init__(self) -> None:
        for flat_type, count in self.units.items():
            if count < 0:
                raise InvalidArgumentError(
                    f"Quota for {flat_type.value} in {self.project_name} "
                    f"cannot be negative: {count}"
                )
        if not 0 <= self.officer_slots <= MAX_OFFICER_SLOTS:
            raise InvalidArgumentError(
                f"Officer slots for {self.project_name} must be within "
                f"[0, {MAX_OFFICER_SLOTS}]: {self.officer_slots}"
            )

    @property
    def offered_flat_types(self) -> frozenset[FlatType]:
        return frozenset(self.units)

    def offers(self, flat_type: FlatType) -> bool:
        return flat_type in self.units

    def available(self, flat_type: FlatType) -> int:
        return self.units.get(flat_type, 0)

    def _with_units(self, flat_type: FlatType, count: int) -> ProjectInventory:
        units = dict(self.units)
        units[flat_type] = count
        return ProjectInventory(self.project_name, units, self.officer_slots)

    def _with_slots(self, officer_slots: int) -> ProjectInventory:
        return ProjectInventory(self.project_name, dict(self.units), officer_slots)

    def reserve_unit(self, flat_type: FlatType) -> ProjectInventory:
        current = self.available(flat_type)
        if current <= 0:
            raise InsufficientInventoryError(self.project_name, flat_type.value, current)
        return self._with_units(flat_type, current - 1)

    def release_unit(self, flat_type: FlatType, count: int = 1) -> ProjectInventory:
        if count < 0:
            raise InvalidArgumentError(
                f"Cannot release a negative number of units: {count}"
            )
        return self._with_units(flat_type, self.available(flat_type) + count)

    def reserve_officer_slot(self) -> ProjectInventory:
        if self.officer_slots <= 0:
            raise NoSlotsAvailableError(self.project_name)
        return self._with_slots(self.officer_slots - 1)

    def release_officer_slot(self) -> ProjectInventory:
        if self.officer_slots >= MAX_OFFICER_SLOTS:
            raise SlotLimitExceededError(self.project_name, MAX_OFFICER_SLOTS)
        return self._with_slots(self.officer_slots + 1)
