"""
Module: housing_kernel.selectors.project_selector
Responsibility: Project lookups and the applicant-facing project listing.
Architecture position: Kernel > Selectors.

Listing rules for applicants:
    - only visible projects;
    - only projects offering at least one flat type the applicant is
      eligible for;
    - officers additionally do not see projects they have registered for,
      whatever the registration status;
    - then the caller's ProjectFilter (name, neighborhood, flat type, sort).
"""

from __future__ import annotations

from sqlalchemy import select

from housing_kernel.domain.dtos import ProjectFilter, ProjectInfo
from housing_kernel.domain.eligibility import is_eligible
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import PersonNotFoundError, ProjectNotFoundError
from housing_kernel.models.person import Person
from housing_kernel.models.project import ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.selectors.base import BaseSelector


class ProjectSelector(BaseSelector[ProjectModel]):
    """Read side of projects."""

    def _list(self, stmt) -> list[ProjectInfo]:
        stmt = stmt.order_by(ProjectModel.name_key)
        return [p.to_dto() for p in self.session.execute(stmt).unique().scalars()]

    def find(self, project_name: str) -> ProjectInfo | None:
        project = self.session.execute(
            select(ProjectModel).where(ProjectModel.name_key == project_name.lower())
        ).unique().scalar_one_or_none()
        return project.to_dto() if project else None

    def get(self, project_name: str) -> ProjectInfo:
        project = self.find(project_name)
        if project is None:
            raise ProjectNotFoundError(project_name)
        return project

    def list_all(self) -> list[ProjectInfo]:
        return self._list(select(ProjectModel))

    def list_visible(self) -> list[ProjectInfo]:
        return self._list(select(ProjectModel).where(ProjectModel.visible.is_(True)))

    def list_by_manager(self, manager_nric: str) -> list[ProjectInfo]:
        return self._list(
            select(ProjectModel).join(Person, Person.id == ProjectModel.manager_id)
            .where(Person.nric == manager_nric)
        )

    def list_for_applicant(
        self,
        nric: str,
        project_filter: ProjectFilter | None = None,
    ) -> list[ProjectInfo]:
        """Projects ``nric`` may apply to, filtered and sorted."""
        person = self.session.execute(
            select(Person).where(Person.nric == nric)
        ).scalar_one_or_none()
        if person is None:
            raise PersonNotFoundError(nric)
        applicant = person.to_dto()

        candidates = [p for p in self.list_visible() if is_eligible(applicant, p)]

        if applicant.has_role(Role.OFFICER):
            registered = set(
                self.session.execute(
                    select(ProjectModel.name)
                    .join(RegistrationModel, RegistrationModel.project_id == ProjectModel.id)
                    .where(RegistrationModel.officer_id == person.id)
                ).scalars()
            )
            candidates = [p for p in candidates if p.name not in registered]

        return (project_filter or ProjectFilter()).apply(candidates)
