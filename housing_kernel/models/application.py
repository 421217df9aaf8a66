"""
Module: housing_kernel.models.application
Responsibility: ORM persistence for housing applications.  Status and the
    withdrawal flag are written only by ApplicationService after a pure
    lifecycle step has validated the transition.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - SINGLE_ACTIVE_APPLICATION: ix_applications_one_active is a partial
      unique index on applicant_id over non-unsuccessful rows.  The service
      checks first; the index is the backstop.
    - ck_applications_valid_status restricts status to the lifecycle values.
    - ck_applications_withdrawal_flag: the flag can only be set while the
      status is successful or booked.
    - application_no is unique and issued by SequenceService.

Failure modes:
    - IntegrityError if two active applications are flushed for one
      applicant, or a status/flag combination violates the checks.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from housing_kernel.db.base import TrackedBase, UUIDString, one_of

if TYPE_CHECKING:
    from housing_kernel.domain.dtos import ApplicationInfo
    from housing_kernel.models.person import Person
    from housing_kernel.models.project import ProjectModel

_ACTIVE_PREDICATE = text("status <> 'unsuccessful'")


class ApplicationModel(TrackedBase):
    """
    One applicant's application for one flat type in one project.

    Contract:
        Rows are deleted only together with their project.  An approved
        withdrawal or a rejection moves the row to ``unsuccessful`` and it
        stays as history.

    Guarantees:
        - applicant_id, project_id and flat_type never change after insert.
    """

    __tablename__ = "applications"

    __table_args__ = (
        UniqueConstraint("application_no", name="uq_applications_application_no"),
        one_of(
            "status",
            ("pending", "successful", "pending_booking", "booked", "unsuccessful"),
            "ck_applications_valid_status",
        ),
        CheckConstraint(
            "NOT withdrawal_requested OR status IN ('successful', 'booked')",
            name="ck_applications_withdrawal_flag",
        ),
        Index(
            "ix_applications_one_active",
            "applicant_id",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
        Index("idx_applications_project_status", "project_id", "status"),
    )

    application_no: Mapped[int] = mapped_column(nullable=False)

    applicant_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("persons.id"),
        nullable=False,
    )
    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    flat_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    withdrawal_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    applicant: Mapped[Person] = relationship("Person", lazy="joined", innerjoin=True)
    project: Mapped[ProjectModel] = relationship("ProjectModel", lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<Application {self.application_no} status={self.status}>"

    def to_dto(self) -> ApplicationInfo:
        from housing_kernel.domain.application_lifecycle import ApplicationStatus
        from housing_kernel.domain.dtos import ApplicationInfo
        from housing_kernel.domain.values import FlatType

        return ApplicationInfo(
            application_no=self.application_no,
            applicant_nric=self.applicant.nric,
            project_name=self.project.name,
            flat_type=FlatType(self.flat_type),
            status=ApplicationStatus(self.status),
            withdrawal_requested=self.withdrawal_requested,
            submitted_at=self.submitted_at,
        )
