"""
Registration lifecycle (``housing_kernel.domain.registration_lifecycle``).

Responsibility
--------------
The state machine of an officer's request to administer a project:
``PENDING -> APPROVED`` or ``PENDING -> REJECTED``, both terminal.  Pure
functions validate submission (role conflict, overlapping commitments,
duplicates) and review (slot reservation), returning immutable steps.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
* NO_ROLE_CONFLICT -- an officer holding an active application cannot
  register.
* NO_OVERLAPPING_COMMITMENT -- an officer's APPROVED registrations never
  cover intersecting windows (inclusive boundaries).
* Approval consumes one officer slot; rejection touches no inventory.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Iterable

from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.values import DateWindow
from housing_kernel.domain.workflow import Guard, Transition, Workflow
from housing_kernel.exceptions import (
    AlreadyReviewedError,
    DuplicateRegistrationError,
    OverlappingCommitmentError,
    RoleConflictError,
)


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RegistrationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


# Statuses that block a second registration for the same project.
OPEN_STATUSES: frozenset[RegistrationStatus] = frozenset({
    RegistrationStatus.PENDING,
    RegistrationStatus.APPROVED,
})


REGISTRATION_WORKFLOW = Workflow(
    name="officer_registration",
    description="Officer's request to administer one project",
    initial_state=RegistrationStatus.PENDING.value,
    states=tuple(s.value for s in RegistrationStatus),
    transitions=(
        Transition(
            RegistrationStatus.PENDING.value,
            RegistrationStatus.APPROVED.value,
            RegistrationAction.APPROVE.value,
            guard=Guard("officer_slot_free", "Project has at least one officer slot"),
            inventory_effect="reserve_officer_slot",
        ),
        Transition(
            RegistrationStatus.PENDING.value,
            RegistrationStatus.REJECTED.value,
            RegistrationAction.REJECT.value,
        ),
    ),
    terminal_states=(
        RegistrationStatus.APPROVED.value,
        RegistrationStatus.REJECTED.value,
    ),
)


@dataclass(frozen=True)
class Commitment:
    """An existing registration of the officer, as seen by submission checks."""

    registration_no: int
    project_name: str
    window: DateWindow
    status: RegistrationStatus


@dataclass(frozen=True)
class RegistrationState:
    status: RegistrationStatus = RegistrationStatus.PENDING
    registration_no: int | None = None
    reviewed_on: date | None = None


@dataclass(frozen=True)
class RegistrationStep:
    action: RegistrationAction
    previous: RegistrationState
    state: RegistrationState
    inventory: ProjectInventory | None = None


def start(
    officer_nric: str,
    project_name: str,
    window: DateWindow,
    active_application_no: int | None,
    commitments: Iterable[Commitment],
) -> RegistrationState:
    """Validate a registration submission and return the initial state.

    Raises:
        RoleConflictError: the officer holds an active application.
        DuplicateRegistrationError: an open registration for the project exists.
        OverlappingCommitmentError: an APPROVED registration's window intersects.
    """
    if active_application_no is not None:
        raise RoleConflictError(officer_nric, active_application_no)

    commitments = tuple(commitments)
    for c in commitments:
        if c.project_name.lower() == project_name.lower() and c.status in OPEN_STATUSES:
            raise DuplicateRegistrationError(officer_nric, project_name, c.registration_no)

    for c in commitments:
        if c.status is not RegistrationStatus.APPROVED:
            continue
        overlap = c.window.intersection(window)
        if overlap is not None:
            raise OverlappingCommitmentError(
                nric=officer_nric,
                project_name=project_name,
                conflicting_project_name=c.project_name,
                overlap_start=str(overlap.open_date),
                overlap_end=str(overlap.close_date),
            )

    return RegistrationState(status=RegistrationStatus.PENDING)


def review(
    state: RegistrationState,
    approve: bool,
    inventory: ProjectInventory,
    today: date,
) -> RegistrationStep:
    """Manager decision on a PENDING registration.

    Approval reserves one officer slot; ``NoSlotsAvailableError`` propagates
    and the registration stays PENDING.
    """
    action = RegistrationAction.APPROVE if approve else RegistrationAction.REJECT
    transition = REGISTRATION_WORKFLOW.transition_for(state.status.value, action.value)
    if transition is None:
        raise AlreadyReviewedError(state.registration_no or 0, state.status.value)

    new_inventory = None
    if transition.inventory_effect == "reserve_officer_slot":
        new_inventory = inventory.reserve_officer_slot()
    return RegistrationStep(
        action,
        state,
        replace(
            state,
            status=RegistrationStatus(transition.to_state),
            reviewed_on=today,
        ),
        inventory=new_inventory,
    )
