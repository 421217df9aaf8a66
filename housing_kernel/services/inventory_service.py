"""
InventoryService -- the sole write path for project inventory counters.

Responsibility:
    Loads a project row under a row lock, hands its ``ProjectInventory``
    snapshot to a bounded operation, and writes the resulting snapshot back
    onto the quota and officer-slot columns.  Both lifecycles route their
    inventory effects through ``apply``; the standalone operations below
    serve project administration and tests.

Architecture position:
    Kernel > Services.  Called by ApplicationService, RegistrationService
    and ProjectService.

Invariants enforced:
    INVENTORY_WRITE_PATH -- no other code assigns ``units_available`` or
        ``officer_slots``.
    NON_NEGATIVE_QUOTA / OFFICER_SLOT_BOUNDS -- every write is a snapshot
        that already passed ``ProjectInventory`` validation; the CHECK
        constraints on the tables are the backstop.

Failure modes:
    - ProjectNotFoundError: no project with that name.
    - InsufficientInventoryError, NoSlotsAvailableError,
      SlotLimitExceededError, InvalidArgumentError: propagated from the
      bounded operation; nothing has been written when they are raised.
"""

from __future__ import annotations

from sqlalchemy import select

from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.values import FlatType
from housing_kernel.exceptions import InvalidArgumentError, ProjectNotFoundError
from housing_kernel.logging_config import get_logger
from housing_kernel.models.project import ProjectModel
from housing_kernel.services.base import BaseService

logger = get_logger("services.inventory")


class InventoryService(BaseService[ProjectModel]):
    """
    Reads and writes project inventory.

    Guarantees:
        - Project rows are fetched ``FOR UPDATE`` before any write, so on
          PostgreSQL two writers to the same project serialize.
        - A failed operation leaves the row untouched.
    """

    def load_project(self, project_name: str, lock: bool = True) -> ProjectModel:
        stmt = select(ProjectModel).where(ProjectModel.name_key == project_name.lower())
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        project = self.session.execute(stmt).unique().scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_name)
        return project

    def snapshot(self, project_name: str) -> ProjectInventory:
        return self.load_project(project_name, lock=False).inventory_snapshot()

    def apply(self, project: ProjectModel, inventory: ProjectInventory, reason: str) -> None:
        """Write a validated snapshot onto ``project`` and flush."""
        before = project.inventory_snapshot()
        project.apply_inventory(inventory)
        self.session.flush()
        logger.info(
            "inventory_updated",
            extra={
                "project_name": project.name,
                "reason": reason,
                "units_before": {t.value: n for t, n in before.units.items()},
                "units_after": {t.value: n for t, n in inventory.units.items()},
                "slots_before": before.officer_slots,
                "slots_after": inventory.officer_slots,
            },
        )

    def reserve_unit(self, project_name: str, flat_type: FlatType) -> ProjectInventory:
        project = self.load_project(project_name)
        inventory = project.inventory_snapshot().reserve_unit(flat_type)
        self.apply(project, inventory, "reserve_unit")
        return inventory

    def release_unit(
        self, project_name: str, flat_type: FlatType, count: int = 1
    ) -> ProjectInventory:
        project = self.load_project(project_name)
        inventory = project.inventory_snapshot().release_unit(flat_type, count)
        self.apply(project, inventory, "release_unit")
        return inventory

    def add_units(self, project_name: str, flat_type: FlatType, count: int) -> ProjectInventory:
        """
        Explicit addition of new units to a project (manager action).

        This is the only way a quota may rise above its creation value other
        than a released booking.
        """
        if count <= 0:
            raise InvalidArgumentError(f"Units to add must be positive: {count}")
        project = self.load_project(project_name)
        if project.flat(flat_type.value) is None:
            raise InvalidArgumentError(f"{project.name} does not offer {flat_type.value}")
        inventory = project.inventory_snapshot().release_unit(flat_type, count)
        self.apply(project, inventory, "add_units")
        return inventory

    def reserve_officer_slot(self, project_name: str) -> ProjectInventory:
        project = self.load_project(project_name)
        inventory = project.inventory_snapshot().reserve_officer_slot()
        self.apply(project, inventory, "reserve_officer_slot")
        return inventory

    def release_officer_slot(self, project_name: str) -> ProjectInventory:
        project = self.load_project(project_name)
        inventory = project.inventory_snapshot().release_officer_slot()
        self.apply(project, inventory, "release_officer_slot")
        return inventory
