"""
Service layer for Person operations.

Registers applicants, officers and managers and resolves them by NRIC for
the other services.  Roles are issued once, at registration, from
``ROLE_SETS``; nothing here changes them afterwards.

Public methods return ``PersonInfo`` DTOs.  The ``*_model`` helpers return
ORM rows and exist for the other kernel services only.
"""

from __future__ import annotations

from sqlalchemy import select

from housing_kernel.domain.dtos import PersonInfo
from housing_kernel.domain.eligibility import is_valid_nric
from housing_kernel.domain.values import ROLE_SETS, MaritalStatus, Role
from housing_kernel.exceptions import (
    InvalidArgumentError,
    InvalidNricError,
    MissingRoleError,
    PersonAlreadyExistsError,
    PersonNotFoundError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.models.person import Person, PersonRole
from housing_kernel.services.base import BaseService

logger = get_logger("services.person")


class PersonService(BaseService[Person]):
    """
    Service for registering and resolving people.

    Contract:
        NRICs are validated against the national format before insert and
        are unique across all roles.
    """

    def find_model(self, nric: str) -> Person | None:
        return self.session.execute(
            select(Person).where(Person.nric == nric)
        ).scalar_one_or_none()

    def get_model(self, nric: str) -> Person:
        person = self.find_model(nric)
        if person is None:
            raise PersonNotFoundError(nric)
        return person

    def require_role(self, nric: str, role: Role) -> Person:
        """Resolve ``nric`` and check it holds ``role``.

        Raises:
            PersonNotFoundError: no such person.
            MissingRoleError: the person exists but lacks the role.
        """
        person = self.get_model(nric)
        if role.value not in person.role_values:
            raise MissingRoleError(nric, role.value)
        return person

    def get(self, nric: str) -> PersonInfo:
        return self.get_model(nric).to_dto()

    def find(self, nric: str) -> PersonInfo | None:
        person = self.find_model(nric)
        return person.to_dto() if person else None

    def register(
        self,
        nric: str,
        name: str,
        age: int,
        marital_status: MaritalStatus | str,
        role: Role = Role.APPLICANT,
    ) -> PersonInfo:
        """
        Register a new person with the role set of ``role``.

        An officer is registered with ``{APPLICANT, OFFICER}``.

        Raises:
            InvalidNricError: NRIC is not S/T + 7 digits + letter.
            InvalidArgumentError: age is negative or not an integer, or the
                marital status is unknown.
            PersonAlreadyExistsError: NRIC already registered.
        """
        if not is_valid_nric(nric):
            raise InvalidNricError(nric)
        if not isinstance(age, int) or isinstance(age, bool) or age < 0:
            raise InvalidArgumentError(f"Age must be a non-negative integer: {age!r}")
        if isinstance(marital_status, str):
            marital_status = marital_status.strip().lower()
        try:
            status = MaritalStatus(marital_status)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown marital status: {marital_status!r}"
            ) from None
        if self.find_model(nric) is not None:
            raise PersonAlreadyExistsError(nric)

        person = Person(
            nric=nric,
            name=name,
            age=age,
            marital_status=status.value,
            roles=[PersonRole(role=r.value) for r in sorted(ROLE_SETS[role], key=lambda r: r.value)],
        )
        self.session.add(person)
        self.session.flush()

        logger.info(
            "person_registered",
            extra={"nric": nric, "roles": sorted(person.role_values)},
        )
        return person.to_dto()
