"""Value objects, workflow definitions and DTO helpers."""

from datetime import date, datetime, timezone

import pytest

from housing_kernel.domain.clock import DeterministicClock
from housing_kernel.domain.dtos import ProjectFilter, ProjectInfo, Receipt
from housing_kernel.domain.values import (
    ROLE_SETS,
    DateWindow,
    FlatType,
    MaritalStatus,
    ProjectSort,
    Role,
)
from housing_kernel.domain.workflow import Transition, Workflow
from housing_kernel.exceptions import InvalidWindowError


class TestDateWindow:

    def test_inverted_window_rejected(self):
        with pytest.raises(InvalidWindowError):
            DateWindow(date(2024, 3, 1), date(2024, 2, 1))

    def test_single_day_window(self):
        w = DateWindow(date(2024, 3, 1), date(2024, 3, 1))
        assert w.contains(date(2024, 3, 1))

    def test_overlap_is_inclusive(self):
        a = DateWindow(date(2024, 1, 1), date(2024, 3, 1))
        b = DateWindow(date(2024, 3, 1), date(2024, 4, 1))
        assert a.overlaps(b) and b.overlaps(a)
        assert a.intersection(b) == DateWindow(date(2024, 3, 1), date(2024, 3, 1))

    def test_disjoint(self):
        a = DateWindow(date(2024, 1, 1), date(2024, 2, 29))
        b = DateWindow(date(2024, 3, 1), date(2024, 4, 1))
        assert not a.overlaps(b)
        assert a.intersection(b) is None


class TestRoles:

    def test_officer_can_also_apply(self):
        assert ROLE_SETS[Role.OFFICER] == {Role.APPLICANT, Role.OFFICER}

    def test_manager_cannot_apply(self):
        assert Role.APPLICANT not in ROLE_SETS[Role.MANAGER]


class TestWorkflow:

    def test_undeclared_state_rejected(self):
        with pytest.raises(ValueError):
            Workflow("w", "", "a", ("a",), (Transition("a", "b", "go"),))

    def test_terminal_state_with_outgoing_transition_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                "w", "", "a", ("a", "b"),
                (Transition("a", "b", "go"), Transition("b", "a", "back")),
                terminal_states=("b",),
            )


class TestClock:

    def test_deterministic_clock_advances(self):
        clock = DeterministicClock(datetime(2024, 1, 1, 23, 59, 59, tzinfo=timezone.utc))
        assert clock.today() == date(2024, 1, 1)
        clock.tick()
        assert clock.today() == date(2024, 1, 2)
        clock.advance_days(2)
        assert clock.today() == date(2024, 1, 4)


def _info(name, neighborhood, units):
    return ProjectInfo(
        name=name,
        neighborhood=neighborhood,
        window=DateWindow(date(2024, 1, 1), date(2024, 3, 1)),
        visible=True,
        officer_slots=10,
        manager_nric="S5000001M",
        units=units,
    )


class TestProjectFilter:

    @pytest.fixture
    def projects(self):
        return [
            _info("Cedar Court", "Bedok", {FlatType.TWO_ROOM: 1}),
            _info("acacia breeze", "Yishun", {FlatType.TWO_ROOM: 1, FlatType.THREE_ROOM: 1}),
            _info("Birch Park", "Bedok", {FlatType.THREE_ROOM: 1}),
        ]

    def test_default_sort_is_name_case_insensitive(self, projects):
        names = [p.name for p in ProjectFilter().apply(projects)]
        assert names == ["acacia breeze", "Birch Park", "Cedar Court"]

    def test_name_desc(self, projects):
        names = [p.name for p in ProjectFilter(sort_by=ProjectSort.NAME_DESC).apply(projects)]
        assert names == ["Cedar Court", "Birch Park", "acacia breeze"]

    def test_neighborhood_sort_breaks_ties_by_name(self, projects):
        f = ProjectFilter(sort_by=ProjectSort.NEIGHBORHOOD_ASC)
        assert [p.name for p in f.apply(projects)] == ["Birch Park", "Cedar Court", "acacia breeze"]

    def test_filters_combine(self, projects):
        f = ProjectFilter(neighborhood_contains="bed", flat_type=FlatType.THREE_ROOM)
        assert [p.name for p in f.apply(projects)] == ["Birch Park"]

    def test_name_contains(self, projects):
        assert [p.name for p in ProjectFilter(name_contains="BREEZE").apply(projects)] == [
            "acacia breeze"
        ]


def test_receipt_text():
    receipt = Receipt(
        application_no=3,
        applicant_nric="S1000001A",
        applicant_name="Sam Single",
        applicant_age=36,
        applicant_marital_status=MaritalStatus.SINGLE,
        project_name="Acacia Breeze",
        neighborhood="Yishun",
        flat_type=FlatType.TWO_ROOM,
        issued_by_nric="T2000001A",
        issued_by_name="Olive Officer",
        issued_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    )
    text = receipt.render_text()
    assert text.startswith("=== Flat Booking Receipt ===")
    assert "Flat Type: 2-Room" in text
    assert "Applicant: Sam Single (S1000001A)" in text
    assert "Issued By: Olive Officer (T2000001A)" in text
