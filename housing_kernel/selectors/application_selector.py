"""
Module: housing_kernel.selectors.application_selector
Responsibility: Application lookups by applicant, project and status, the
    manager's withdrawal queue, the officer's booking queue and the rows of
    the booking report.
Architecture position: Kernel > Selectors.

The booking report returns data rows only; formatting is the caller's job.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import aliased

from housing_kernel.domain.application_lifecycle import ACTIVE_STATUSES, ApplicationStatus
from housing_kernel.domain.dtos import (
    ApplicationInfo,
    BookingReportFilter,
    BookingReportRow,
)
from housing_kernel.domain.registration_lifecycle import RegistrationStatus
from housing_kernel.domain.values import FlatType, MaritalStatus
from housing_kernel.exceptions import ApplicationNotFoundError
from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.person import Person
from housing_kernel.models.project import ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.selectors.base import BaseSelector

_Applicant = aliased(Person, name="applicant")
_Manager = aliased(Person, name="manager")
_Officer = aliased(Person, name="officer")


class ApplicationSelector(BaseSelector[ApplicationModel]):
    """Read side of applications."""

    def _base(self):
        return (
            select(ApplicationModel)
            .join(_Applicant, _Applicant.id == ApplicationModel.applicant_id)
            .join(ProjectModel, ProjectModel.id == ApplicationModel.project_id)
        )

    def _list(self, stmt) -> list[ApplicationInfo]:
        stmt = stmt.order_by(ApplicationModel.application_no)
        return [a.to_dto() for a in self.session.execute(stmt).unique().scalars()]

    def get(self, application_no: int) -> ApplicationInfo:
        app = self.session.execute(
            select(ApplicationModel).where(ApplicationModel.application_no == application_no)
        ).unique().scalar_one_or_none()
        if app is None:
            raise ApplicationNotFoundError(str(application_no))
        return app.to_dto()

    def active_for_applicant(self, nric: str) -> ApplicationInfo | None:
        """The applicant's single active application, if any."""
        app = self.session.execute(
            self._base().where(
                _Applicant.nric == nric,
                ApplicationModel.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        ).unique().scalar_one_or_none()
        return app.to_dto() if app else None

    def history_for_applicant(self, nric: str) -> list[ApplicationInfo]:
        return self._list(self._base().where(_Applicant.nric == nric))

    def by_project(
        self, project_name: str, status: ApplicationStatus | None = None
    ) -> list[ApplicationInfo]:
        stmt = self._base().where(ProjectModel.name_key == project_name.lower())
        if status is not None:
            stmt = stmt.where(ApplicationModel.status == status.value)
        return self._list(stmt)

    def by_status(self, status: ApplicationStatus) -> list[ApplicationInfo]:
        return self._list(self._base().where(ApplicationModel.status == status.value))

    def withdrawal_requests(self, manager_nric: str | None = None) -> list[ApplicationInfo]:
        """Applications awaiting a withdrawal decision, optionally for one manager."""
        stmt = self._base().where(ApplicationModel.withdrawal_requested.is_(True))
        if manager_nric is not None:
            stmt = stmt.join(_Manager, _Manager.id == ProjectModel.manager_id).where(
                _Manager.nric == manager_nric
            )
        return self._list(stmt)

    def pending_bookings_for_officer(self, officer_nric: str) -> list[ApplicationInfo]:
        """PENDING_BOOKING applications in projects the officer is approved for."""
        assigned = (
            select(RegistrationModel.project_id)
            .join(_Officer, _Officer.id == RegistrationModel.officer_id)
            .where(
                _Officer.nric == officer_nric,
                RegistrationModel.status == RegistrationStatus.APPROVED.value,
            )
        )
        return self._list(
            self._base().where(
                ApplicationModel.status == ApplicationStatus.PENDING_BOOKING.value,
                ApplicationModel.project_id.in_(assigned),
            )
        )

    def booking_report(
        self,
        report_filter: BookingReportFilter | None = None,
        manager_nric: str | None = None,
    ) -> list[BookingReportRow]:
        """
        BOOKED applications as report rows.

        Filters by marital status, flat type and an inclusive age range; when
        ``manager_nric`` is given only that manager's projects are included.
        """
        f = report_filter or BookingReportFilter()
        stmt = self._base().where(ApplicationModel.status == ApplicationStatus.BOOKED.value)
        if f.marital_status is not None:
            stmt = stmt.where(_Applicant.marital_status == f.marital_status.value)
        if f.flat_type is not None:
            stmt = stmt.where(ApplicationModel.flat_type == f.flat_type.value)
        if f.min_age is not None:
            stmt = stmt.where(_Applicant.age >= f.min_age)
        if f.max_age is not None:
            stmt = stmt.where(_Applicant.age <= f.max_age)
        if manager_nric is not None:
            stmt = stmt.join(_Manager, _Manager.id == ProjectModel.manager_id).where(
                _Manager.nric == manager_nric
            )
        stmt = stmt.order_by(ProjectModel.name_key, ApplicationModel.application_no)

        rows = []
        for app in self.session.execute(stmt).unique().scalars():
            applicant = app.applicant
            rows.append(
                BookingReportRow(
                    application_no=app.application_no,
                    applicant_nric=applicant.nric,
                    applicant_name=applicant.name,
                    applicant_age=applicant.age,
                    marital_status=MaritalStatus(applicant.marital_status),
                    flat_type=FlatType(app.flat_type),
                    project_name=app.project.name,
                )
            )
        return rows
