"""Project administration: creation rules, edits, visibility, restock, delete."""

from datetime import date

import pytest

from housing_kernel.domain.values import FlatType
from housing_kernel.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    InvalidWindowError,
    MissingRoleError,
    NotProjectOwnerError,
    OverlappingCommitmentError,
    ProjectNameTakenError,
    ProjectNotFoundError,
    ProjectWindowOverlapError,
)

TWO = FlatType.TWO_ROOM
THREE = FlatType.THREE_ROOM


class TestCreate:

    def test_created_project(self, project, people):
        assert project.name == "Acacia Breeze"
        assert project.units == {TWO: 2, THREE: 3}
        assert project.officer_slots == 10
        assert project.visible is True
        assert project.manager_nric == people["manager"]
        assert project.open_date == date(2024, 1, 1)

    def test_prices_recorded(self, make_project):
        p = make_project(prices={TWO: 350000, THREE: 450000})
        assert p.prices == {TWO: 350000, THREE: 450000}

    def test_name_unique_ignoring_case(self, make_project, people):
        make_project(name="Acacia Breeze")
        with pytest.raises(ProjectNameTakenError):
            make_project(name="ACACIA breeze", manager=people["other_manager"])

    def test_blank_name(self, make_project):
        with pytest.raises(InvalidArgumentError):
            make_project(name="   ")

    def test_inverted_window(self, make_project):
        with pytest.raises(InvalidWindowError):
            make_project(open_date=date(2024, 3, 1), close_date=date(2024, 1, 1))

    def test_manager_windows_may_not_overlap(self, make_project):
        make_project()
        with pytest.raises(ProjectWindowOverlapError) as exc_info:
            make_project(name="Birch Park", open_date=date(2024, 3, 1), close_date=date(2024, 5, 1))
        assert exc_info.value.existing_project_name == "Acacia Breeze"

    def test_other_manager_same_window(self, make_project, people):
        make_project()
        other = make_project(name="Birch Park", manager=people["other_manager"])
        assert other.manager_nric == people["other_manager"]

    @pytest.mark.parametrize("slots", [-1, 11])
    def test_officer_slots_bounds(self, make_project, slots):
        with pytest.raises(InvalidArgumentError):
            make_project(officer_slots=slots)

    def test_negative_quota(self, make_project):
        with pytest.raises(InvalidArgumentError):
            make_project(units={TWO: -1})

    def test_negative_price(self, make_project):
        with pytest.raises(InvalidArgumentError):
            make_project(prices={TWO: -5})

    def test_only_managers_create(self, make_project, people):
        with pytest.raises(MissingRoleError):
            make_project(manager=people["officer"])


class TestEdit:

    def test_rename(self, coordinator, people, project, project_selector):
        edited = coordinator.edit_project(people["manager"], project.name, name="Acacia Heights")
        assert edited.name == "Acacia Heights"
        assert project_selector.find(project.name) is None

    def test_rename_to_taken_name(self, coordinator, people, project, make_project):
        make_project(name="Birch Park", manager=people["other_manager"])
        with pytest.raises(ProjectNameTakenError):
            coordinator.edit_project(people["manager"], project.name, name="birch park")

    def test_change_window_and_prices(self, coordinator, people, project):
        edited = coordinator.edit_project(
            people["manager"], project.name,
            close_date=date(2024, 4, 1), prices={TWO: 300000},
        )
        assert edited.close_date == date(2024, 4, 1)
        assert edited.prices[TWO] == 300000

    def test_price_for_unoffered_type(self, coordinator, people, make_project):
        p = make_project(units={TWO: 1})
        with pytest.raises(InvalidArgumentError):
            coordinator.edit_project(people["manager"], p.name, prices={THREE: 1})

    def test_only_owner_edits(self, coordinator, people, project):
        with pytest.raises(NotProjectOwnerError):
            coordinator.edit_project(people["other_manager"], project.name, neighborhood="Bedok")

    def test_window_edit_checked_against_officer_commitments(
        self, coordinator, people, project, make_project, assigned_officer_factory
    ):
        later = make_project(
            name="Birch Park", manager=people["other_manager"],
            open_date=date(2024, 5, 1), close_date=date(2024, 6, 30),
        )
        assigned_officer_factory(project.name)
        assigned_officer_factory(later.name, manager=people["other_manager"])

        with pytest.raises(OverlappingCommitmentError):
            coordinator.edit_project(
                people["other_manager"], later.name, open_date=date(2024, 2, 1)
            )

    def test_edit_is_logged(self, captured_logs, coordinator, people, project):
        coordinator.edit_project(people["manager"], project.name, neighborhood="Bedok", visible=False)
        edited = [r for r in captured_logs() if r["message"] == "project_edited"]
        assert sorted(edited[0]["fields"]) == ["neighborhood", "visible"]


class TestVisibilityAndUnits:

    def test_toggle(self, coordinator, people, project):
        assert coordinator.toggle_visibility(people["manager"], project.name).visible is False
        assert coordinator.toggle_visibility(people["manager"], project.name).visible is True

    def test_add_units(self, coordinator, people, project):
        assert coordinator.add_units(people["manager"], project.name, TWO, 3).units[TWO] == 5

    def test_add_units_of_type_not_offered(self, coordinator, people, make_project, project_selector):
        p = make_project(units={TWO: 1})
        with pytest.raises(InvalidArgumentError, match="does not offer"):
            coordinator.add_units(people["manager"], p.name, THREE, 2)
        restored = project_selector.get(p.name)
        assert restored.units == {TWO: 1}
        assert THREE not in restored.prices

    def test_add_units_by_non_owner(self, coordinator, people, project):
        with pytest.raises(NotProjectOwnerError):
            coordinator.add_units(people["other_manager"], project.name, TWO, 3)


class TestDelete:

    def test_delete_unused_project(self, coordinator, people, project, project_selector):
        coordinator.delete_project(people["manager"], project.name)
        assert project_selector.find(project.name) is None
        with pytest.raises(ProjectNotFoundError):
            coordinator.toggle_visibility(people["manager"], project.name)

    def test_refused_with_active_application(self, coordinator, people, project):
        coordinator.submit_application(people["single"], project.name, TWO)
        with pytest.raises(InvalidStateError):
            coordinator.delete_project(people["manager"], project.name)

    def test_refused_with_approved_officer(self, coordinator, people, project, assigned_officer):
        with pytest.raises(InvalidStateError):
            coordinator.delete_project(people["manager"], project.name)

    def test_closed_history_is_removed(
        self, coordinator, people, project, application_selector, registration_selector
    ):
        app = coordinator.submit_application(people["single"], project.name, TWO)
        coordinator.review_application(people["manager"], app.application_no, False)
        registration = coordinator.submit_registration(people["other_officer"], project.name)
        coordinator.review_registration(people["manager"], registration.registration_no, False)

        coordinator.delete_project(people["manager"], project.name)

        assert application_selector.history_for_applicant(people["single"]) == []
        assert registration_selector.by_officer(people["other_officer"]) == []

    def test_name_reusable_after_delete(self, coordinator, people, project, make_project):
        coordinator.delete_project(people["manager"], project.name)
        again = make_project(name=project.name)
        assert again.units == {TWO: 2, THREE: 3}
