"""
Module: housing_kernel.selectors.registration_selector
Responsibility: Registration lookups by officer, by project (optionally by
    status) and by manager through the projects the manager owns.
Architecture position: Kernel > Selectors.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import aliased

from housing_kernel.domain.dtos import RegistrationInfo
from housing_kernel.domain.registration_lifecycle import RegistrationStatus
from housing_kernel.exceptions import RegistrationNotFoundError
from housing_kernel.models.person import Person
from housing_kernel.models.project import ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.selectors.base import BaseSelector

_Officer = aliased(Person, name="officer")
_Manager = aliased(Person, name="manager")


class RegistrationSelector(BaseSelector[RegistrationModel]):
    """Read side of officer registrations."""

    def _base(self):
        return (
            select(RegistrationModel)
            .join(_Officer, _Officer.id == RegistrationModel.officer_id)
            .join(ProjectModel, ProjectModel.id == RegistrationModel.project_id)
        )

    def _list(self, stmt, status: RegistrationStatus | None = None) -> list[RegistrationInfo]:
        if status is not None:
            stmt = stmt.where(RegistrationModel.status == status.value)
        stmt = stmt.order_by(RegistrationModel.registration_no)
        return [r.to_dto() for r in self.session.execute(stmt).unique().scalars()]

    def get(self, registration_no: int) -> RegistrationInfo:
        registration = self.session.execute(
            select(RegistrationModel).where(
                RegistrationModel.registration_no == registration_no
            )
        ).unique().scalar_one_or_none()
        if registration is None:
            raise RegistrationNotFoundError(str(registration_no))
        return registration.to_dto()

    def by_officer(
        self, officer_nric: str, status: RegistrationStatus | None = None
    ) -> list[RegistrationInfo]:
        return self._list(self._base().where(_Officer.nric == officer_nric), status)

    def by_project(
        self, project_name: str, status: RegistrationStatus | None = None
    ) -> list[RegistrationInfo]:
        return self._list(
            self._base().where(ProjectModel.name_key == project_name.lower()), status
        )

    def approved_for_project(self, project_name: str) -> list[RegistrationInfo]:
        return self.by_project(project_name, RegistrationStatus.APPROVED)

    def by_manager(
        self, manager_nric: str, status: RegistrationStatus | None = None
    ) -> list[RegistrationInfo]:
        stmt = self._base().join(_Manager, _Manager.id == ProjectModel.manager_id).where(
            _Manager.nric == manager_nric
        )
        return self._list(stmt, status)

    def find_for_officer_and_project(
        self, officer_nric: str, project_name: str
    ) -> RegistrationInfo | None:
        """Most recent registration of the officer for the project, if any."""
        registration = self.session.execute(
            self._base()
            .where(
                _Officer.nric == officer_nric,
                ProjectModel.name_key == project_name.lower(),
            )
            .order_by(RegistrationModel.registration_no.desc())
            .limit(1)
        ).unique().scalar_one_or_none()
        return registration.to_dto() if registration else None
