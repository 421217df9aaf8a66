"""
Application lifecycle (``housing_kernel.domain.application_lifecycle``).

Responsibility
--------------
The state machine of one applicant's housing application, as pure functions
over immutable snapshots.  Each function validates its preconditions, then
returns an ``ApplicationStep`` describing the new state and, where the step
touches inventory, the new inventory snapshot.  Nothing is mutated here;
the application service persists the step.

States
------
::

    PENDING --approve--> SUCCESSFUL --request_booking--> PENDING_BOOKING --book--> BOOKED
       |                     |                                                      |
       +--reject--+          +--approve_withdrawal--+      +--approve_withdrawal----+
                  v                                 v      v
                            UNSUCCESSFUL (terminal)

``withdrawal_requested`` is orthogonal to status.  It may become True only
while status is SUCCESSFUL or BOOKED and is False in every other status.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.

Invariants enforced
-------------------
* Quota is checked (not decremented) at review and re-checked and
  decremented at booking.
* Approving withdrawal of a BOOKED application releases exactly one unit
  (inventory conservation).
* Rejecting a withdrawal never changes status, flag, or inventory.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from housing_kernel.domain.eligibility import eligible_flat_types
from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.values import FlatType
from housing_kernel.domain.workflow import Guard, Transition, Workflow
from housing_kernel.exceptions import (
    DuplicateApplicationError,
    InsufficientInventoryError,
    InvalidStateError,
    NotEligibleError,
)


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    PENDING_BOOKING = "pending_booking"
    BOOKED = "booked"
    UNSUCCESSFUL = "unsuccessful"


class ApplicationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_BOOKING = "request_booking"
    BOOK = "book"
    REQUEST_WITHDRAWAL = "request_withdrawal"
    APPROVE_WITHDRAWAL = "approve_withdrawal"
    REJECT_WITHDRAWAL = "reject_withdrawal"


# Statuses from which a withdrawal may be requested.
WITHDRAWABLE_STATUSES: frozenset[ApplicationStatus] = frozenset({
    ApplicationStatus.SUCCESSFUL,
    ApplicationStatus.BOOKED,
})

# Statuses that count as the applicant's one active application.
ACTIVE_STATUSES: frozenset[ApplicationStatus] = frozenset(
    s for s in ApplicationStatus if s is not ApplicationStatus.UNSUCCESSFUL
)


_S = ApplicationStatus
_A = ApplicationAction

APPLICATION_WORKFLOW = Workflow(
    name="housing_application",
    description="Applicant's application for one flat type in one project",
    initial_state=_S.PENDING.value,
    states=tuple(s.value for s in ApplicationStatus),
    transitions=(
        Transition(
            _S.PENDING.value, _S.SUCCESSFUL.value, _A.APPROVE.value,
            guard=Guard("quota_available", "Project quota for the flat type is above zero"),
        ),
        Transition(_S.PENDING.value, _S.UNSUCCESSFUL.value, _A.REJECT.value),
        Transition(_S.SUCCESSFUL.value, _S.PENDING_BOOKING.value, _A.REQUEST_BOOKING.value),
        Transition(
            _S.PENDING_BOOKING.value, _S.BOOKED.value, _A.BOOK.value,
            inventory_effect="reserve_unit",
        ),
        Transition(_S.SUCCESSFUL.value, _S.UNSUCCESSFUL.value, _A.APPROVE_WITHDRAWAL.value),
        Transition(
            _S.BOOKED.value, _S.UNSUCCESSFUL.value, _A.APPROVE_WITHDRAWAL.value,
            inventory_effect="release_unit",
        ),
    ),
    terminal_states=(_S.UNSUCCESSFUL.value,),
)


@dataclass(frozen=True)
class ApplicationState:
    """The mutable part of an application, frozen for one step."""

    status: ApplicationStatus = ApplicationStatus.PENDING
    withdrawal_requested: bool = False
    application_no: int | None = None

    @property
    def label(self) -> str:
        if self.application_no is None:
            return "application"
        return f"application {self.application_no}"


@dataclass(frozen=True)
class ApplicationStep:
    """Outcome of one lifecycle function.

    ``inventory`` is the new snapshot when the step changed inventory, else
    None.  ``declined`` marks a withdrawal rejection: a reported outcome,
    not a state change.
    """

    action: ApplicationAction
    previous: ApplicationState
    state: ApplicationState
    inventory: ProjectInventory | None = None
    declined: bool = False

    @property
    def changed(self) -> bool:
        return self.state != self.previous or self.inventory is not None


def _fire(state: ApplicationState, action: ApplicationAction, reason: str = "") -> ApplicationStatus:
    transition = APPLICATION_WORKFLOW.transition_for(state.status.value, action.value)
    if transition is None:
        raise InvalidStateError(state.label, state.status.value, action.value, reason)
    return ApplicationStatus(transition.to_state)


def start(
    applicant_nric: str,
    applicant,
    project: ProjectInventory,
    flat_type: FlatType,
    active_application_no: int | None,
) -> ApplicationState:
    """Validate a submission and return the initial state.

    Raises:
        DuplicateApplicationError: applicant already holds an active application.
        NotEligibleError: flat type not offered or not allowed for the applicant.
    """
    if active_application_no is not None:
        raise DuplicateApplicationError(applicant_nric, active_application_no)
    if not project.offers(flat_type) or flat_type not in eligible_flat_types(applicant, project):
        raise NotEligibleError(applicant_nric, project.project_name, flat_type.value)
    return ApplicationState(status=ApplicationStatus.PENDING, withdrawal_requested=False)


def _refuse_if_withdrawal_requested(state: ApplicationState, action: ApplicationAction) -> None:
    if state.withdrawal_requested:
        raise InvalidStateError(
            state.label, state.status.value, action.value, "withdrawal requested"
        )


def review(
    state: ApplicationState,
    approve: bool,
    inventory: ProjectInventory,
    flat_type: FlatType,
) -> ApplicationStep:
    """Manager decision on a PENDING application without a withdrawal request."""
    action = ApplicationAction.APPROVE if approve else ApplicationAction.REJECT
    _refuse_if_withdrawal_requested(state, action)
    new_status = _fire(state, action)
    if approve and inventory.available(flat_type) <= 0:
        raise InsufficientInventoryError(
            inventory.project_name, flat_type.value, inventory.available(flat_type)
        )
    return ApplicationStep(action, state, replace(state, status=new_status))


def request_booking(state: ApplicationState) -> ApplicationStep:
    """Applicant elects to proceed with a SUCCESSFUL application."""
    action = ApplicationAction.REQUEST_BOOKING
    _refuse_if_withdrawal_requested(state, action)
    new_status = _fire(state, action)
    return ApplicationStep(action, state, replace(state, status=new_status))


def book(
    state: ApplicationState,
    inventory: ProjectInventory,
    flat_type: FlatType,
) -> ApplicationStep:
    """Officer books the flat; consumes one unit of ``flat_type``."""
    action = ApplicationAction.BOOK
    _refuse_if_withdrawal_requested(state, action)
    new_status = _fire(state, action)
    new_inventory = inventory.reserve_unit(flat_type)
    return ApplicationStep(
        action, state, replace(state, status=new_status), inventory=new_inventory
    )


def request_withdrawal(state: ApplicationState) -> ApplicationStep:
    """Set the withdrawal flag on a SUCCESSFUL or BOOKED application."""
    action = ApplicationAction.REQUEST_WITHDRAWAL
    if state.status not in WITHDRAWABLE_STATUSES:
        raise InvalidStateError(
            state.label, state.status.value, action.value,
            "only successful or booked applications can be withdrawn",
        )
    if state.withdrawal_requested:
        raise InvalidStateError(
            state.label, state.status.value, action.value, "withdrawal already requested"
        )
    return ApplicationStep(action, state, replace(state, withdrawal_requested=True))


def review_withdrawal(
    state: ApplicationState,
    approve: bool,
    inventory: ProjectInventory,
    flat_type: FlatType,
) -> ApplicationStep:
    """Manager decision on a withdrawal request.

    Approval moves the application to UNSUCCESSFUL and clears the flag,
    releasing one unit when it was BOOKED.  Rejection leaves everything as
    is and is reported through ``declined``.
    """
    action = ApplicationAction.APPROVE_WITHDRAWAL if approve else ApplicationAction.REJECT_WITHDRAWAL
    if not state.withdrawal_requested:
        raise InvalidStateError(
            state.label, state.status.value, action.value, "no withdrawal requested"
        )
    if not approve:
        return ApplicationStep(action, state, state, declined=True)

    transition = APPLICATION_WORKFLOW.transition_for(state.status.value, action.value)
    if transition is None:
        raise InvalidStateError(state.label, state.status.value, action.value)
    new_inventory = None
    if transition.inventory_effect == "release_unit":
        new_inventory = inventory.release_unit(flat_type, 1)
    return ApplicationStep(
        action,
        state,
        replace(
            state,
            status=ApplicationStatus(transition.to_state),
            withdrawal_requested=False,
        ),
        inventory=new_inventory,
    )
