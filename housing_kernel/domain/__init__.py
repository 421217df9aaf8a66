"""
Pure domain layer.

This module contains value objects, state machines and DTOs with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Time/clock (except the injectable Clock itself)
- I/O

All domain objects are immutable and deterministic.
"""

from housing_kernel.domain.application_lifecycle import (
    ACTIVE_STATUSES,
    APPLICATION_WORKFLOW,
    ApplicationAction,
    ApplicationState,
    ApplicationStatus,
    ApplicationStep,
)
from housing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from housing_kernel.domain.dtos import (
    ApplicationInfo,
    BookingReportFilter,
    BookingReportRow,
    PersonInfo,
    ProjectFilter,
    ProjectInfo,
    Receipt,
    RegistrationInfo,
    WithdrawalReviewResult,
)
from housing_kernel.domain.eligibility import (
    eligible_flat_types,
    is_eligible,
    is_valid_nric,
)
from housing_kernel.domain.inventory import MAX_OFFICER_SLOTS, ProjectInventory
from housing_kernel.domain.registration_lifecycle import (
    REGISTRATION_WORKFLOW,
    Commitment,
    RegistrationAction,
    RegistrationState,
    RegistrationStatus,
    RegistrationStep,
)
from housing_kernel.domain.values import (
    DateWindow,
    FlatType,
    MaritalStatus,
    ProjectSort,
    Role,
)
from housing_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    # Values
    "DateWindow",
    "FlatType",
    "MaritalStatus",
    "ProjectSort",
    "Role",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
    # Eligibility
    "eligible_flat_types",
    "is_eligible",
    "is_valid_nric",
    # Inventory
    "MAX_OFFICER_SLOTS",
    "ProjectInventory",
    # Application lifecycle
    "ACTIVE_STATUSES",
    "APPLICATION_WORKFLOW",
    "ApplicationAction",
    "ApplicationState",
    "ApplicationStatus",
    "ApplicationStep",
    # Registration lifecycle
    "REGISTRATION_WORKFLOW",
    "Commitment",
    "RegistrationAction",
    "RegistrationState",
    "RegistrationStatus",
    "RegistrationStep",
    # DTOs
    "ApplicationInfo",
    "BookingReportFilter",
    "BookingReportRow",
    "PersonInfo",
    "ProjectFilter",
    "ProjectInfo",
    "Receipt",
    "RegistrationInfo",
    "WithdrawalReviewResult",
]
