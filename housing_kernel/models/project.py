"""
Module: housing_kernel.models.project
Responsibility: ORM persistence for housing projects and the inventory they
    own: one ``FlatInventoryModel`` row per offered flat type (remaining units
    and selling price) plus the officer-slot counter on the project row.
Architecture position: Kernel > Models.  May import from db/base.py only
    (domain types are imported lazily inside conversion helpers).

Invariants enforced:
    - NON_NEGATIVE_QUOTA: ck_flat_inventory_units_non_negative.
    - OFFICER_SLOT_BOUNDS: ck_projects_officer_slots_bounds (0..10).
    - Project names are unique ignoring case (uq_projects_name_key on the
      lower-cased ``name_key`` column).
    - ck_projects_window: close_date >= open_date.
    - INVENTORY_WRITE_PATH: ``apply_inventory`` is called by
      InventoryService only.

Failure modes:
    - IntegrityError if a caller bypasses InventoryService and writes a
      negative quota or an out-of-range slot count.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from housing_kernel.db.base import TrackedBase, UUIDString, one_of
from housing_kernel.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from housing_kernel.domain.dtos import ProjectInfo
    from housing_kernel.domain.inventory import ProjectInventory
    from housing_kernel.domain.values import DateWindow
    from housing_kernel.models.person import Person


class ProjectModel(TrackedBase):
    """
    A housing project owned by one manager.

    Contract:
        ``manager_id`` is set at creation and never reassigned.  Quota and
        slot columns change only through ``apply_inventory``.

    Guarantees:
        - ``window`` is always a valid inclusive DateWindow.
        - ``inventory_snapshot`` reflects the persisted counters exactly.
    """

    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("name_key", name="uq_projects_name_key"),
        CheckConstraint(
            "officer_slots >= 0 AND officer_slots <= 10",
            name="ck_projects_officer_slots_bounds",
        ),
        CheckConstraint("close_date >= open_date", name="ck_projects_window"),
        Index("idx_projects_manager", "manager_id"),
        Index("idx_projects_visible", "visible"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Lower-cased name, backs case-insensitive uniqueness and lookup
    name_key: Mapped[str] = mapped_column(String(100), nullable=False)
    neighborhood: Mapped[str] = mapped_column(String(100), nullable=False)
    open_date: Mapped[date] = mapped_column(Date, nullable=False)
    close_date: Mapped[date] = mapped_column(Date, nullable=False)
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    officer_slots: Mapped[int] = mapped_column(nullable=False, default=0)

    manager_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("persons.id"),
        nullable=False,
    )

    manager: Mapped[Person] = relationship("Person", lazy="joined", innerjoin=True)

    flats: Mapped[list[FlatInventoryModel]] = relationship(
        "FlatInventoryModel",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="FlatInventoryModel.flat_type",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Project {self.name} slots={self.officer_slots}>"

    @property
    def window(self) -> DateWindow:
        from housing_kernel.domain.values import DateWindow

        return DateWindow(self.open_date, self.close_date)

    def flat(self, flat_type: str) -> FlatInventoryModel | None:
        for row in self.flats:
            if row.flat_type == flat_type:
                return row
        return None

    def inventory_snapshot(self) -> ProjectInventory:
        from housing_kernel.domain.inventory import ProjectInventory
        from housing_kernel.domain.values import FlatType

        return ProjectInventory(
            project_name=self.name,
            units={FlatType(row.flat_type): row.units_available for row in self.flats},
            officer_slots=self.officer_slots,
        )

    def apply_inventory(self, inventory: ProjectInventory) -> None:
        """Write a validated snapshot back onto the counter columns."""
        for flat_type, count in inventory.units.items():
            row = self.flat(flat_type.value)
            if row is None:
                raise InvalidArgumentError(f"{self.name} does not offer {flat_type.value}")
            row.units_available = count
        self.officer_slots = inventory.officer_slots

    def to_dto(self) -> ProjectInfo:
        from housing_kernel.domain.dtos import ProjectInfo
        from housing_kernel.domain.values import FlatType

        return ProjectInfo(
            name=self.name,
            neighborhood=self.neighborhood,
            window=self.window,
            visible=self.visible,
            officer_slots=self.officer_slots,
            manager_nric=self.manager.nric,
            units={FlatType(row.flat_type): row.units_available for row in self.flats},
            prices={FlatType(row.flat_type): row.price for row in self.flats},
        )


class FlatInventoryModel(TrackedBase):
    """Remaining units and price of one flat type in one project."""

    __tablename__ = "flat_inventory"

    __table_args__ = (
        UniqueConstraint("project_id", "flat_type", name="uq_flat_inventory_project_type"),
        one_of("flat_type", ("two_room", "three_room"), "ck_flat_inventory_flat_type"),
        CheckConstraint("units_available >= 0", name="ck_flat_inventory_units_non_negative"),
        CheckConstraint("price >= 0", name="ck_flat_inventory_price_non_negative"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    flat_type: Mapped[str] = mapped_column(String(20), nullable=False)
    units_available: Mapped[int] = mapped_column(nullable=False, default=0)
    # Selling price in whole currency units; informational only
    price: Mapped[int] = mapped_column(nullable=False, default=0)

    project: Mapped[ProjectModel] = relationship("ProjectModel", back_populates="flats")
