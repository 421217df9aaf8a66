"""Registration lifecycle tests (pure functions, no database)."""

from datetime import date

import pytest

from housing_kernel.domain import registration_lifecycle as lifecycle
from housing_kernel.domain.inventory import ProjectInventory
from housing_kernel.domain.registration_lifecycle import (
    Commitment,
    RegistrationState,
    RegistrationStatus,
)
from housing_kernel.domain.values import DateWindow
from housing_kernel.exceptions import (
    AlreadyReviewedError,
    DuplicateRegistrationError,
    NoSlotsAvailableError,
    OverlappingCommitmentError,
    RoleConflictError,
)

R = RegistrationStatus
JAN_MAR = DateWindow(date(2024, 1, 1), date(2024, 3, 1))
FEB_APR = DateWindow(date(2024, 2, 15), date(2024, 4, 1))
MAY_JUN = DateWindow(date(2024, 5, 1), date(2024, 6, 30))
TODAY = date(2024, 1, 10)


def _commitment(project, window, status, no=1):
    return Commitment(no, project, window, status)


class TestStart:

    def test_clean_submission_is_pending(self):
        state = lifecycle.start("T2000001A", "Birch", FEB_APR, None, [])
        assert state.status is R.PENDING
        assert state.reviewed_on is None

    def test_active_application_is_role_conflict(self):
        with pytest.raises(RoleConflictError) as exc_info:
            lifecycle.start("T2000001A", "Birch", FEB_APR, 12, [])
        assert exc_info.value.application_no == 12

    def test_overlapping_approved_commitment(self):
        approved = _commitment("Acacia", JAN_MAR, R.APPROVED)
        with pytest.raises(OverlappingCommitmentError) as exc_info:
            lifecycle.start("T2000001A", "Birch", FEB_APR, None, [approved])
        assert exc_info.value.conflicting_project_name == "Acacia"
        assert exc_info.value.overlap_start == "2024-02-15"
        assert exc_info.value.overlap_end == "2024-03-01"

    def test_single_shared_day_overlaps(self):
        approved = _commitment("Acacia", JAN_MAR, R.APPROVED)
        touching = DateWindow(date(2024, 3, 1), date(2024, 3, 31))
        with pytest.raises(OverlappingCommitmentError):
            lifecycle.start("T2000001A", "Birch", touching, None, [approved])

    @pytest.mark.parametrize("status", [R.PENDING, R.REJECTED])
    def test_only_approved_commitments_block(self, status):
        other = _commitment("Acacia", JAN_MAR, status)
        assert lifecycle.start("T2000001A", "Birch", FEB_APR, None, [other]).status is R.PENDING

    def test_disjoint_window(self):
        approved = _commitment("Acacia", JAN_MAR, R.APPROVED)
        assert lifecycle.start("T2000001A", "Birch", MAY_JUN, None, [approved]).status is R.PENDING

    @pytest.mark.parametrize("status", [R.PENDING, R.APPROVED])
    def test_open_registration_for_same_project(self, status):
        existing = _commitment("birch", FEB_APR, status, no=4)
        with pytest.raises(DuplicateRegistrationError) as exc_info:
            lifecycle.start("T2000001A", "Birch", FEB_APR, None, [existing])
        assert exc_info.value.registration_no == 4

    def test_rejected_registration_may_be_resubmitted(self):
        rejected = _commitment("Birch", FEB_APR, R.REJECTED)
        assert lifecycle.start("T2000001A", "Birch", FEB_APR, None, [rejected]).status is R.PENDING


class TestReview:

    def test_approve_reserves_slot(self):
        inv = ProjectInventory("Birch", {}, 3)
        step = lifecycle.review(RegistrationState(R.PENDING, 1), True, inv, TODAY)
        assert step.state.status is R.APPROVED
        assert step.state.reviewed_on == TODAY
        assert step.inventory.officer_slots == 2

    def test_approve_with_no_slots(self):
        inv = ProjectInventory("Birch", {}, 0)
        with pytest.raises(NoSlotsAvailableError):
            lifecycle.review(RegistrationState(R.PENDING, 1), True, inv, TODAY)

    def test_reject_touches_no_inventory(self):
        inv = ProjectInventory("Birch", {}, 0)
        step = lifecycle.review(RegistrationState(R.PENDING, 1), False, inv, TODAY)
        assert step.state.status is R.REJECTED
        assert step.inventory is None

    @pytest.mark.parametrize("status", [R.APPROVED, R.REJECTED])
    def test_second_review(self, status):
        inv = ProjectInventory("Birch", {}, 5)
        with pytest.raises(AlreadyReviewedError) as exc_info:
            lifecycle.review(RegistrationState(status, 9), True, inv, TODAY)
        assert exc_info.value.registration_no == 9
