"""
Module: housing_kernel.models.person
Responsibility: ORM persistence for people known to the allocation core
    (applicants, officers, managers) and the roles each one holds.
Architecture position: Kernel > Models.  May import from db/base.py only
    (domain DTOs are imported lazily inside ``to_dto``).
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - nric is globally unique (uq_persons_nric).
    - A person holds each role at most once (uq_person_roles_person_role).
    - Roles are fixed at registration; no service rewrites person_roles.

Failure modes:
    - IntegrityError on duplicate NRIC (PersonService checks first and
      raises PersonAlreadyExistsError).
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from housing_kernel.db.base import Base, TrackedBase, UUIDString, one_of

if TYPE_CHECKING:
    from housing_kernel.domain.dtos import PersonInfo


class Person(TrackedBase):
    """
    A person identified by NRIC.

    Contract:
        Role-specific behaviour is gated on ``roles`` rather than on a
        subclass; an officer is a person holding both APPLICANT and OFFICER.

    Guarantees:
        - nric, age and marital_status are what eligibility reads.
        - roles are loaded eagerly with the person.
    """

    __tablename__ = "persons"

    __table_args__ = (
        UniqueConstraint("nric", name="uq_persons_nric"),
        one_of("marital_status", ("single", "married"), "ck_persons_marital_status"),
    )

    nric: Mapped[str] = mapped_column(String(9), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int] = mapped_column(nullable=False)
    marital_status: Mapped[str] = mapped_column(String(20), nullable=False)

    roles: Mapped[list[PersonRole]] = relationship(
        "PersonRole",
        back_populates="person",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def role_values(self) -> frozenset[str]:
        return frozenset(r.role for r in self.roles)

    def __repr__(self) -> str:
        return f"<Person {self.nric} roles={sorted(self.role_values)}>"

    def to_dto(self) -> PersonInfo:
        from housing_kernel.domain.dtos import PersonInfo
        from housing_kernel.domain.values import MaritalStatus, Role

        return PersonInfo(
            nric=self.nric,
            name=self.name,
            age=self.age,
            marital_status=MaritalStatus(self.marital_status),
            roles=frozenset(Role(r) for r in self.role_values),
        )


class PersonRole(Base):
    """One capability held by a person."""

    __tablename__ = "person_roles"

    __table_args__ = (
        UniqueConstraint("person_id", "role", name="uq_person_roles_person_role"),
        one_of("role", ("applicant", "officer", "manager"), "ck_person_roles_role"),
    )

    person_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("persons.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)

    person: Mapped[Person] = relationship("Person", back_populates="roles")
