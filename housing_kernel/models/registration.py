"""
Module: housing_kernel.models.registration
Responsibility: ORM persistence for officer registrations to administer a
    project.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ck_registrations_valid_status restricts status to pending, approved,
      rejected.
    - ck_registrations_reviewed: reviewed_on is set exactly when the
      registration has left pending.
    - registration_no is unique and issued by SequenceService.

Failure modes:
    - IntegrityError on a status/reviewed_on combination violating the checks.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from housing_kernel.db.base import TrackedBase, UUIDString, one_of

if TYPE_CHECKING:
    from housing_kernel.domain.dtos import RegistrationInfo
    from housing_kernel.domain.registration_lifecycle import Commitment
    from housing_kernel.models.person import Person
    from housing_kernel.models.project import ProjectModel


class RegistrationModel(TrackedBase):
    """An officer's request to administer one project."""

    __tablename__ = "registrations"

    __table_args__ = (
        UniqueConstraint("registration_no", name="uq_registrations_registration_no"),
        one_of("status", ("pending", "approved", "rejected"), "ck_registrations_valid_status"),
        CheckConstraint(
            "(status = 'pending' AND reviewed_on IS NULL) OR "
            "(status <> 'pending' AND reviewed_on IS NOT NULL)",
            name="ck_registrations_reviewed",
        ),
        Index("idx_registrations_officer", "officer_id"),
        Index("idx_registrations_project_status", "project_id", "status"),
    )

    registration_no: Mapped[int] = mapped_column(nullable=False)

    officer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("persons.id"),
        nullable=False,
    )
    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    submitted_on: Mapped[date] = mapped_column(Date, nullable=False)
    reviewed_on: Mapped[date | None] = mapped_column(Date, nullable=True)

    officer: Mapped[Person] = relationship("Person", lazy="joined", innerjoin=True)
    project: Mapped[ProjectModel] = relationship("ProjectModel", lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<Registration {self.registration_no} status={self.status}>"

    def commitment(self) -> Commitment:
        from housing_kernel.domain.registration_lifecycle import (
            Commitment,
            RegistrationStatus,
        )

        return Commitment(
            registration_no=self.registration_no,
            project_name=self.project.name,
            window=self.project.window,
            status=RegistrationStatus(self.status),
        )

    def to_dto(self) -> RegistrationInfo:
        from housing_kernel.domain.dtos import RegistrationInfo
        from housing_kernel.domain.registration_lifecycle import RegistrationStatus

        return RegistrationInfo(
            registration_no=self.registration_no,
            officer_nric=self.officer.nric,
            project_name=self.project.name,
            status=RegistrationStatus(self.status),
            submitted_on=self.submitted_on,
            reviewed_on=self.reviewed_on,
        )
