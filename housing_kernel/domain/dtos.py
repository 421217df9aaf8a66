"""
Data Transfer Objects (``housing_kernel.domain.dtos``).

Responsibility
--------------
Frozen dataclasses returned by services and selectors.  Callers never
receive ORM instances, so nothing outside a service can mutate persisted
state by accident.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from housing_kernel.domain.application_lifecycle import (
    ACTIVE_STATUSES,
    ApplicationState,
    ApplicationStatus,
)
from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.registration_lifecycle import (
    RegistrationState,
    RegistrationStatus,
)
from housing_kernel.domain.values import (
    DateWindow,
    FlatType,
    MaritalStatus,
    ProjectSort,
    Role,
)


@dataclass(frozen=True)
class PersonInfo:
    """A registered person and the roles they hold."""

    nric: str
    name: str
    age: int
    marital_status: MaritalStatus
    roles: frozenset[Role]

    def has_role(self, role: Role) -> bool:
        return role in self.roles


@dataclass(frozen=True)
class ProjectInfo:
    name: str
    neighborhood: str
    window: DateWindow
    visible: bool
    officer_slots: int
    manager_nric: str
    units: dict[FlatType, int] = field(default_factory=dict)
    prices: dict[FlatType, int] = field(default_factory=dict)

    @property
    def offered_flat_types(self) -> frozenset[FlatType]:
        return frozenset(self.units)

    @property
    def open_date(self) -> date:
        return self.window.open_date

    @property
    def close_date(self) -> date:
        return self.window.close_date

    def inventory(self) -> ProjectInventory:
        return ProjectInventory(self.name, dict(self.units), self.officer_slots)


@dataclass(frozen=True)
class ApplicationInfo:
    application_no: int
    applicant_nric: str
    project_name: str
    flat_type: FlatType
    status: ApplicationStatus
    withdrawal_requested: bool
    submitted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def state(self) -> ApplicationState:
        return ApplicationState(
            status=self.status,
            withdrawal_requested=self.withdrawal_requested,
            application_no=self.application_no,
        )


@dataclass(frozen=True)
class RegistrationInfo:
    registration_no: int
    officer_nric: str
    project_name: str
    status: RegistrationStatus
    submitted_on: date
    reviewed_on: date | None = None

    def state(self) -> RegistrationState:
        return RegistrationState(
            status=self.status,
            registration_no=self.registration_no,
            reviewed_on=self.reviewed_on,
        )


@dataclass(frozen=True)
class Receipt:
    """Immutable booking confirmation produced by BookFlat."""

    application_no: int
    applicant_nric: str
    applicant_name: str
    applicant_age: int
    applicant_marital_status: MaritalStatus
    project_name: str
    neighborhood: str
    flat_type: FlatType
    issued_by_nric: str
    issued_by_name: str
    issued_at: datetime

    def render_text(self) -> str:
        return "\n".join([
            "=== Flat Booking Receipt ===",
            f"Issued: {self.issued_at.isoformat(timespec='seconds')}",
            f"Application No: {self.application_no}",
            f"Applicant: {self.applicant_name} ({self.applicant_nric})",
            f"Age: {self.applicant_age}",
            f"Marital Status: {self.applicant_marital_status.value}",
            f"Project: {self.project_name} ({self.neighborhood})",
            f"Flat Type: {self.flat_type.label}",
            f"Issued By: {self.issued_by_name} ({self.issued_by_nric})",
        ])


@dataclass(frozen=True)
class WithdrawalReviewResult:
    """Outcome of ReviewWithdrawal.

    ``declined`` is True when the manager rejected the request; the
    application is returned unchanged in that case.
    """

    application: ApplicationInfo
    approved: bool
    units_released: int = 0

    @property
    def declined(self) -> bool:
        return not self.approved


@dataclass(frozen=True)
class ProjectFilter:
    """Listing filter for projects; all criteria are optional."""

    name_contains: str | None = None
    neighborhood_contains: str | None = None
    flat_type: FlatType | None = None
    sort_by: ProjectSort = ProjectSort.NAME_ASC

    def matches(self, project: ProjectInfo) -> bool:
        if self.name_contains and self.name_contains.lower() not in project.name.lower():
            return False
        if (
            self.neighborhood_contains
            and self.neighborhood_contains.lower() not in project.neighborhood.lower()
        ):
            return False
        if self.flat_type is not None and self.flat_type not in project.units:
            return False
        return True

    def apply(self, projects: list[ProjectInfo]) -> list[ProjectInfo]:
        selected = [p for p in projects if self.matches(p)]
        if self.sort_by in (ProjectSort.NEIGHBORHOOD_ASC, ProjectSort.NEIGHBORHOOD_DESC):
            key = lambda p: (p.neighborhood.lower(), p.name.lower())  # noqa: E731
        else:
            key = lambda p: p.name.lower()  # noqa: E731
        reverse = self.sort_by in (ProjectSort.NAME_DESC, ProjectSort.NEIGHBORHOOD_DESC)
        return sorted(selected, key=key, reverse=reverse)


@dataclass(frozen=True)
class BookingReportFilter:
    marital_status: MaritalStatus | None = None
    flat_type: FlatType | None = None
    min_age: int | None = None
    max_age: int | None = None


@dataclass(frozen=True)
class BookingReportRow:
    application_no: int
    applicant_nric: str
    applicant_name: str
    applicant_age: int
    marital_status: MaritalStatus
    flat_type: FlatType
    project_name: str
