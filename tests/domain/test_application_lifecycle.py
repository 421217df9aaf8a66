"""
Application lifecycle tests (pure functions, no database).

Each function returns a step and never mutates its inputs; invalid
transitions raise InvalidStateError.
"""

import pytest

from housing_kernel.domain import application_lifecycle as lifecycle
from housing_kernel.domain.application_lifecycle import (
    ACTIVE_STATUSES,
    APPLICATION_WORKFLOW,
    ApplicationState,
    ApplicationStatus,
)
from housing_kernel.domain.dtos import PersonInfo
from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.values import FlatType, MaritalStatus, Role
from housing_kernel.exceptions import (
    DuplicateApplicationError,
    InsufficientInventoryError,
    InvalidStateError,
    NotEligibleError,
)

S = ApplicationStatus
TWO = FlatType.TWO_ROOM


def _state(status, withdrawal=False, no=1):
    return ApplicationState(status=status, withdrawal_requested=withdrawal, application_no=no)


@pytest.fixture
def inventory():
    return ProjectInventory("Acacia Breeze", {TWO: 2, FlatType.THREE_ROOM: 3}, 10)


@pytest.fixture
def single_36():
    return PersonInfo("S1000001A", "Sam", 36, MaritalStatus.SINGLE, frozenset({Role.APPLICANT}))


class TestWorkflowDefinition:

    def test_unsuccessful_is_terminal(self):
        assert APPLICATION_WORKFLOW.actions_from(S.UNSUCCESSFUL.value) == ()

    def test_only_booking_consumes_inventory(self):
        effects = {
            (t.from_state, t.action): t.inventory_effect
            for t in APPLICATION_WORKFLOW.transitions
            if t.inventory_effect
        }
        assert effects == {
            (S.PENDING_BOOKING.value, "book"): "reserve_unit",
            (S.BOOKED.value, "approve_withdrawal"): "release_unit",
        }

    def test_active_statuses(self):
        assert S.UNSUCCESSFUL not in ACTIVE_STATUSES
        assert len(ACTIVE_STATUSES) == 4


class TestStart:

    def test_eligible_submission_is_pending(self, single_36, inventory):
        state = lifecycle.start("S1000001A", single_36, inventory, TWO, None)
        assert state.status is S.PENDING
        assert state.withdrawal_requested is False

    def test_duplicate_active_application(self, single_36, inventory):
        with pytest.raises(DuplicateApplicationError) as exc_info:
            lifecycle.start("S1000001A", single_36, inventory, TWO, 7)
        assert exc_info.value.existing_application_no == 7

    def test_single_cannot_take_three_room(self, single_36, inventory):
        with pytest.raises(NotEligibleError):
            lifecycle.start("S1000001A", single_36, inventory, FlatType.THREE_ROOM, None)

    def test_type_not_offered(self, single_36):
        three_only = ProjectInventory("P", {FlatType.THREE_ROOM: 1}, 10)
        with pytest.raises(NotEligibleError):
            lifecycle.start("S1000001A", single_36, three_only, TWO, None)

    def test_zero_quota_does_not_block_submission(self, single_36):
        empty = ProjectInventory("P", {TWO: 0}, 10)
        assert lifecycle.start("S1000001A", single_36, empty, TWO, None).status is S.PENDING


class TestReview:

    def test_approve_checks_but_does_not_consume(self, inventory):
        step = lifecycle.review(_state(S.PENDING), True, inventory, TWO)
        assert step.state.status is S.SUCCESSFUL
        assert step.inventory is None

    def test_approve_with_zero_quota(self):
        empty = ProjectInventory("P", {TWO: 0}, 10)
        with pytest.raises(InsufficientInventoryError):
            lifecycle.review(_state(S.PENDING), True, empty, TWO)

    def test_reject(self, inventory):
        step = lifecycle.review(_state(S.PENDING), False, inventory, TWO)
        assert step.state.status is S.UNSUCCESSFUL

    def test_reject_ignores_quota(self):
        empty = ProjectInventory("P", {TWO: 0}, 10)
        assert lifecycle.review(_state(S.PENDING), False, empty, TWO).state.status is S.UNSUCCESSFUL

    @pytest.mark.parametrize("status", [S.SUCCESSFUL, S.PENDING_BOOKING, S.BOOKED, S.UNSUCCESSFUL])
    def test_only_pending_can_be_reviewed(self, status, inventory):
        with pytest.raises(InvalidStateError) as exc_info:
            lifecycle.review(_state(status), True, inventory, TWO)
        assert exc_info.value.current_state == status.value


class TestBooking:

    def test_request_booking(self):
        step = lifecycle.request_booking(_state(S.SUCCESSFUL))
        assert step.state.status is S.PENDING_BOOKING

    @pytest.mark.parametrize("status", [S.PENDING, S.PENDING_BOOKING, S.BOOKED, S.UNSUCCESSFUL])
    def test_request_booking_requires_successful(self, status):
        with pytest.raises(InvalidStateError):
            lifecycle.request_booking(_state(status))

    def test_book_consumes_one_unit(self, inventory):
        step = lifecycle.book(_state(S.PENDING_BOOKING), inventory, TWO)
        assert step.state.status is S.BOOKED
        assert step.inventory.available(TWO) == 1
        assert inventory.available(TWO) == 2

    def test_book_rechecks_quota(self):
        empty = ProjectInventory("P", {TWO: 0}, 10)
        with pytest.raises(InsufficientInventoryError):
            lifecycle.book(_state(S.PENDING_BOOKING), empty, TWO)

    def test_book_requires_pending_booking(self, inventory):
        with pytest.raises(InvalidStateError):
            lifecycle.book(_state(S.SUCCESSFUL), inventory, TWO)

    def test_request_booking_refused_while_withdrawal_pending(self):
        requested = lifecycle.request_withdrawal(_state(S.SUCCESSFUL)).state
        with pytest.raises(InvalidStateError, match="withdrawal requested"):
            lifecycle.request_booking(requested)

        # the withdrawal can still be decided
        step = lifecycle.review_withdrawal(
            requested, True, ProjectInventory("P", {TWO: 1}, 10), TWO
        )
        assert step.state == _state(S.UNSUCCESSFUL)

    def test_book_refused_with_flag_set(self, inventory):
        with pytest.raises(InvalidStateError):
            lifecycle.book(_state(S.PENDING_BOOKING, withdrawal=True), inventory, TWO)


class TestWithdrawal:

    @pytest.mark.parametrize("status", [S.SUCCESSFUL, S.BOOKED])
    def test_request_sets_flag_only(self, status):
        step = lifecycle.request_withdrawal(_state(status))
        assert step.state.status is status
        assert step.state.withdrawal_requested is True

    @pytest.mark.parametrize("status", [S.PENDING, S.PENDING_BOOKING, S.UNSUCCESSFUL])
    def test_request_from_other_statuses(self, status):
        with pytest.raises(InvalidStateError):
            lifecycle.request_withdrawal(_state(status))

    def test_request_twice(self):
        with pytest.raises(InvalidStateError):
            lifecycle.request_withdrawal(_state(S.SUCCESSFUL, withdrawal=True))

    def test_approve_successful_touches_no_inventory(self, inventory):
        step = lifecycle.review_withdrawal(_state(S.SUCCESSFUL, True), True, inventory, TWO)
        assert step.state.status is S.UNSUCCESSFUL
        assert step.state.withdrawal_requested is False
        assert step.inventory is None

    def test_approve_booked_releases_one_unit(self, inventory):
        step = lifecycle.review_withdrawal(_state(S.BOOKED, True), True, inventory, TWO)
        assert step.state.status is S.UNSUCCESSFUL
        assert step.state.withdrawal_requested is False
        assert step.inventory.available(TWO) == 3

    @pytest.mark.parametrize("status", [S.SUCCESSFUL, S.BOOKED])
    def test_reject_changes_nothing(self, status, inventory):
        state = _state(status, True)
        step = lifecycle.review_withdrawal(state, False, inventory, TWO)
        assert step.declined
        assert step.state == state
        assert step.inventory is None
        assert not step.changed

    def test_review_without_request(self, inventory):
        with pytest.raises(InvalidStateError):
            lifecycle.review_withdrawal(_state(S.BOOKED), True, inventory, TWO)

    def test_book_then_withdraw_conserves_inventory(self, inventory):
        booked = lifecycle.book(_state(S.PENDING_BOOKING), inventory, TWO)
        requested = lifecycle.request_withdrawal(booked.state)
        released = lifecycle.review_withdrawal(requested.state, True, booked.inventory, TWO)
        assert released.inventory == inventory
