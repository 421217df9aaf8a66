"""
ProjectService -- manager-side project administration.

Responsibility:
    Creates, edits, hides/shows and deletes projects, and adds units to a
    project's quota.  Initial quotas and officer slots are written through
    InventoryService like every other inventory change.

Architecture position:
    Kernel > Services.  Depends on PersonService (role checks) and
    InventoryService (counter writes).

Invariants enforced:
    - Project names are unique ignoring case.
    - A manager's project windows never intersect (inclusive).
    - Only the owning manager edits, toggles, deletes or restocks a project.
    - NO_OVERLAPPING_COMMITMENT -- moving a window may not make an assigned
      officer's approved projects overlap.

Failure modes:
    - MissingRoleError, NotProjectOwnerError: wrong actor.
    - ProjectNameTakenError, InvalidWindowError, ProjectWindowOverlapError,
      InvalidArgumentError: rejected input.
    - OverlappingCommitmentError: window edit clashes with an assigned
      officer's other approved project.
    - InvalidStateError: delete refused while the project is in use.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from housing_kernel.domain.application_lifecycle import ACTIVE_STATUSES
from housing_kernel.domain.dtos import ProjectInfo
from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.registration_lifecycle import RegistrationStatus
from housing_kernel.domain.values import DateWindow, FlatType, Role
from housing_kernel.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    NotProjectOwnerError,
    OverlappingCommitmentError,
    ProjectNameTakenError,
    ProjectWindowOverlapError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.person import Person
from housing_kernel.models.project import FlatInventoryModel, ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.services.base import BaseService
from housing_kernel.services.inventory_service import InventoryService
from housing_kernel.services.person_service import PersonService

logger = get_logger("services.project")


class ProjectService(BaseService[ProjectModel]):
    """
    Project administration for managers.

    Contract:
        Every method takes the acting manager's NRIC first and checks
        ownership before touching the project.
    """

    def __init__(
        self,
        session: Session,
        persons: PersonService,
        inventory: InventoryService,
    ):
        super().__init__(session)
        self._persons = persons
        self._inventory = inventory

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _name_taken(self, name: str, exclude: ProjectModel | None = None) -> bool:
        stmt = select(ProjectModel.id).where(ProjectModel.name_key == name.lower())
        if exclude is not None:
            stmt = stmt.where(ProjectModel.id != exclude.id)
        return self.session.execute(stmt).first() is not None

    def _check_manager_windows(
        self,
        manager: Person,
        name: str,
        window: DateWindow,
        exclude: ProjectModel | None = None,
    ) -> None:
        stmt = select(ProjectModel).where(ProjectModel.manager_id == manager.id)
        for existing in self.session.execute(stmt).unique().scalars():
            if exclude is not None and existing.id == exclude.id:
                continue
            overlap = existing.window.intersection(window)
            if overlap is not None:
                raise ProjectWindowOverlapError(
                    manager_nric=manager.nric,
                    project_name=name,
                    existing_project_name=existing.name,
                    overlap_start=str(overlap.open_date),
                    overlap_end=str(overlap.close_date),
                )

    def _check_officer_commitments(self, project: ProjectModel, window: DateWindow) -> None:
        approved = RegistrationStatus.APPROVED.value
        assigned = self.session.execute(
            select(RegistrationModel.officer_id).where(
                RegistrationModel.project_id == project.id,
                RegistrationModel.status == approved,
            )
        ).scalars().all()
        if not assigned:
            return
        others = self.session.execute(
            select(RegistrationModel).where(
                RegistrationModel.officer_id.in_(assigned),
                RegistrationModel.project_id != project.id,
                RegistrationModel.status == approved,
            )
        ).unique().scalars()
        for other in others:
            overlap = other.project.window.intersection(window)
            if overlap is not None:
                raise OverlappingCommitmentError(
                    nric=other.officer.nric,
                    project_name=project.name,
                    conflicting_project_name=other.project.name,
                    overlap_start=str(overlap.open_date),
                    overlap_end=str(overlap.close_date),
                )

    def owned_project(self, manager_nric: str, project_name: str) -> ProjectModel:
        """Load a project for update after checking ``manager_nric`` owns it."""
        self._persons.require_role(manager_nric, Role.MANAGER)
        project = self._inventory.load_project(project_name)
        if project.manager.nric != manager_nric:
            raise NotProjectOwnerError(manager_nric, project.name)
        return project

    @staticmethod
    def _validate_prices(prices: dict[FlatType, int]) -> None:
        for flat_type, price in prices.items():
            if price < 0:
                raise InvalidArgumentError(
                    f"Price for {flat_type.value} cannot be negative: {price}"
                )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_project(
        self,
        manager_nric: str,
        name: str,
        neighborhood: str,
        open_date: date,
        close_date: date,
        units: dict[FlatType, int],
        prices: dict[FlatType, int] | None = None,
        officer_slots: int = 10,
        visible: bool = True,
    ) -> ProjectInfo:
        """
        Create a project owned by ``manager_nric``.

        Raises:
            MissingRoleError: actor is not a manager.
            InvalidArgumentError: blank name, negative quota or price, or
                officer slots outside [0, 10].
            ProjectNameTakenError: the name is used (ignoring case).
            InvalidWindowError: close date before open date.
            ProjectWindowOverlapError: the manager already runs a project
                in an intersecting window.
        """
        manager = self._persons.require_role(manager_nric, Role.MANAGER)
        name = name.strip()
        if not name:
            raise InvalidArgumentError("Project name cannot be blank")
        if self._name_taken(name):
            raise ProjectNameTakenError(name)

        window = DateWindow(open_date, close_date)
        self._check_manager_windows(manager, name, window)

        prices = dict(prices or {})
        self._validate_prices(prices)
        # Validates quotas and slot bounds before anything is added.
        inventory = ProjectInventory(name, dict(units), officer_slots)

        project = ProjectModel(
            name=name,
            name_key=name.lower(),
            neighborhood=neighborhood,
            open_date=window.open_date,
            close_date=window.close_date,
            visible=visible,
            officer_slots=0,
            manager=manager,
            flats=[
                FlatInventoryModel(
                    flat_type=flat_type.value,
                    units_available=0,
                    price=prices.get(flat_type, 0),
                )
                for flat_type in sorted(inventory.units, key=lambda t: t.value)
            ],
        )
        self.session.add(project)
        self.session.flush()
        self._inventory.apply(project, inventory, "project_created")

        logger.info(
            "project_created",
            extra={
                "project_name": name,
                "manager_nric": manager_nric,
                "window": str(window),
                "officer_slots": officer_slots,
            },
        )
        return project.to_dto()

    def edit_project(
        self,
        manager_nric: str,
        project_name: str,
        *,
        name: str | None = None,
        neighborhood: str | None = None,
        open_date: date | None = None,
        close_date: date | None = None,
        prices: dict[FlatType, int] | None = None,
        visible: bool | None = None,
    ) -> ProjectInfo:
        """
        Edit the descriptive fields of a project.

        Quotas and officer slots are not editable here; use ``add_units``.
        """
        project = self.owned_project(manager_nric, project_name)
        manager = project.manager
        changed: list[str] = []

        if name is not None and name.strip() != project.name:
            new_name = name.strip()
            if not new_name:
                raise InvalidArgumentError("Project name cannot be blank")
            if self._name_taken(new_name, exclude=project):
                raise ProjectNameTakenError(new_name)
            project.name = new_name
            project.name_key = new_name.lower()
            changed.append("name")

        if open_date is not None or close_date is not None:
            window = DateWindow(open_date or project.open_date, close_date or project.close_date)
            if window != project.window:
                self._check_manager_windows(manager, project.name, window, exclude=project)
                self._check_officer_commitments(project, window)
                project.open_date = window.open_date
                project.close_date = window.close_date
                changed.append("window")

        if neighborhood is not None and neighborhood != project.neighborhood:
            project.neighborhood = neighborhood
            changed.append("neighborhood")

        if prices:
            self._validate_prices(prices)
            for flat_type, price in prices.items():
                row = project.flat(flat_type.value)
                if row is None:
                    raise InvalidArgumentError(
                        f"{project.name} does not offer {flat_type.value}"
                    )
                row.price = price
            changed.append("prices")

        if visible is not None and visible != project.visible:
            project.visible = visible
            changed.append("visible")

        self.session.flush()
        logger.info(
            "project_edited",
            extra={"project_name": project.name, "fields": changed},
        )
        return project.to_dto()

    def toggle_visibility(self, manager_nric: str, project_name: str) -> ProjectInfo:
        project = self.owned_project(manager_nric, project_name)
        project.visible = not project.visible
        self.session.flush()
        logger.info(
            "project_visibility_toggled",
            extra={"project_name": project.name, "visible": project.visible},
        )
        return project.to_dto()

    def add_units(
        self,
        manager_nric: str,
        project_name: str,
        flat_type: FlatType,
        count: int,
    ) -> ProjectInfo:
        project = self.owned_project(manager_nric, project_name)
        self._inventory.add_units(project.name, flat_type, count)
        return project.to_dto()

    def delete_project(self, manager_nric: str, project_name: str) -> None:
        """
        Delete a project together with its closed history.

        Raises:
            InvalidStateError: the project still has active applications or
                approved officers.
        """
        project = self.owned_project(manager_nric, project_name)

        active_apps = self.session.execute(
            select(func.count(ApplicationModel.id)).where(
                ApplicationModel.project_id == project.id,
                ApplicationModel.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        ).scalar_one()
        approved_regs = self.session.execute(
            select(func.count(RegistrationModel.id)).where(
                RegistrationModel.project_id == project.id,
                RegistrationModel.status == RegistrationStatus.APPROVED.value,
            )
        ).scalar_one()
        if active_apps or approved_regs:
            raise InvalidStateError(
                f"project {project.name}",
                "in_use",
                "delete",
                f"{active_apps} active applications, {approved_regs} approved officers",
            )

        self.session.execute(
            delete(ApplicationModel).where(ApplicationModel.project_id == project.id)
        )
        self.session.execute(
            delete(RegistrationModel).where(RegistrationModel.project_id == project.id)
        )
        name = project.name
        self.session.delete(project)
        self.session.flush()
        logger.info("project_deleted", extra={"project_name": name})
