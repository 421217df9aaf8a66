"""Read-only person lookups."""

from __future__ import annotations

from sqlalchemy import select

from housing_kernel.domain.dtos import PersonInfo
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import PersonNotFoundError
from housing_kernel.models.person import Person, PersonRole
from housing_kernel.selectors.base import BaseSelector


class PersonSelector(BaseSelector[Person]):
    def find(self, nric: str) -> PersonInfo | None:
        person = self.session.execute(
            select(Person).where(Person.nric == nric)
        ).scalar_one_or_none()
        return person.to_dto() if person else None

    def get(self, nric: str) -> PersonInfo:
        person = self.find(nric)
        if person is None:
            raise PersonNotFoundError(nric)
        return person

    def list_by_role(self, role: Role) -> list[PersonInfo]:
        stmt = (
            select(Person)
            .join(PersonRole, PersonRole.person_id == Person.id)
            .where(PersonRole.role == role.value)
            .order_by(Person.nric)
        )
        return [p.to_dto() for p in self.session.execute(stmt).scalars()]
