"""
Pytest fixtures for the housing kernel test suite.

Provides:
- In-memory SQLite sessions isolated per test by rollback
- A deterministic clock and a fully wired AllocationCoordinator
- Factories for people and projects

Environment Variables:
- HOUSING_TEST_DATABASE_URL: database to run against (default in-memory SQLite)
"""

import json
import logging
import os
from datetime import date, datetime, timezone
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from housing_kernel.db.engine import build_engine, create_tables, drop_tables
from housing_kernel.domain.clock import DeterministicClock
from housing_kernel.domain.values import FlatType, MaritalStatus, Role
from housing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from housing_kernel.selectors import (
    ApplicationSelector,
    PersonSelector,
    ProjectSelector,
    RegistrationSelector,
)
from housing_kernel.services import AllocationCoordinator

DEFAULT_TEST_DATABASE_URL = "sqlite:///:memory:"

MANAGER_NRIC = "S5000001M"
OTHER_MANAGER_NRIC = "S5000002N"
OFFICER_NRIC = "T2000001A"
OTHER_OFFICER_NRIC = "T2000002B"
SINGLE_NRIC = "S1000001A"
MARRIED_NRIC = "S1000002B"
YOUNG_NRIC = "T1000003C"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture housing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, coordinator):
            coordinator.submit_application(...)
            logs = captured_logs()
            assert any(r["message"] == "request_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("housing_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Session-scoped DB infrastructure (engine + tables once per suite)
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("HOUSING_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = build_engine(get_database_url())
    create_tables(eng)
    yield eng
    drop_tables(eng)
    eng.dispose()


@pytest.fixture(scope="function")
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    The session joins an outer transaction on a dedicated connection.  Any
    ``session.commit()`` inside the test releases a savepoint only; the
    outer transaction is rolled back at teardown, undoing all changes.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Clock fixed at 2024-01-01 12:00 UTC."""
    return DeterministicClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Coordinator and selectors
# =============================================================================


@pytest.fixture
def coordinator(session, deterministic_clock) -> AllocationCoordinator:
    return AllocationCoordinator(session, clock=deterministic_clock)


@pytest.fixture
def person_selector(session):
    return PersonSelector(session)


@pytest.fixture
def project_selector(session):
    return ProjectSelector(session)


@pytest.fixture
def application_selector(session):
    return ApplicationSelector(session)


@pytest.fixture
def registration_selector(session):
    return RegistrationSelector(session)


# =============================================================================
# Data factories
# =============================================================================


@pytest.fixture
def people(coordinator):
    """Register the standard cast and return their NRICs by nickname."""
    coordinator.register_person(MANAGER_NRIC, "Mina Manager", 45, MaritalStatus.MARRIED, Role.MANAGER)
    coordinator.register_person(OTHER_MANAGER_NRIC, "Omar Manager", 50, MaritalStatus.SINGLE, Role.MANAGER)
    coordinator.register_person(OFFICER_NRIC, "Olive Officer", 30, MaritalStatus.MARRIED, Role.OFFICER)
    coordinator.register_person(OTHER_OFFICER_NRIC, "Oscar Officer", 40, MaritalStatus.SINGLE, Role.OFFICER)
    coordinator.register_person(SINGLE_NRIC, "Sam Single", 36, MaritalStatus.SINGLE)
    coordinator.register_person(MARRIED_NRIC, "Mei Married", 28, MaritalStatus.MARRIED)
    coordinator.register_person(YOUNG_NRIC, "Yan Young", 25, MaritalStatus.SINGLE)
    return {
        "manager": MANAGER_NRIC,
        "other_manager": OTHER_MANAGER_NRIC,
        "officer": OFFICER_NRIC,
        "other_officer": OTHER_OFFICER_NRIC,
        "single": SINGLE_NRIC,
        "married": MARRIED_NRIC,
        "young": YOUNG_NRIC,
    }


@pytest.fixture
def make_project(coordinator, people):
    """Factory creating a project owned by the standard manager.

    Defaults to {TWO_ROOM: 2, THREE_ROOM: 3} over 2024-01-01 .. 2024-03-01.
    """

    def _make(
        name: str = "Acacia Breeze",
        neighborhood: str = "Yishun",
        open_date: date = date(2024, 1, 1),
        close_date: date = date(2024, 3, 1),
        units: dict | None = None,
        officer_slots: int = 10,
        manager: str = MANAGER_NRIC,
        visible: bool = True,
        prices: dict | None = None,
    ):
        if units is None:
            units = {FlatType.TWO_ROOM: 2, FlatType.THREE_ROOM: 3}
        return coordinator.create_project(
            manager, name, neighborhood, open_date, close_date,
            units, prices, officer_slots, visible,
        )

    return _make


@pytest.fixture
def project(make_project):
    return make_project()


@pytest.fixture
def assigned_officer_factory(coordinator, people):
    """Factory approving an officer (default the standard one) for a project."""

    def _assign(project_name: str, officer: str = OFFICER_NRIC, manager: str = MANAGER_NRIC):
        registration = coordinator.submit_registration(officer, project_name)
        coordinator.review_registration(manager, registration.registration_no, True)
        return officer

    return _assign


@pytest.fixture
def assigned_officer(assigned_officer_factory, project):
    """The standard officer, approved to administer the standard project."""
    return assigned_officer_factory(project.name)


@pytest.fixture
def booked_application(coordinator, people, project, assigned_officer):
    """A BOOKED TWO_ROOM application of the single applicant."""
    app = coordinator.submit_application(SINGLE_NRIC, project.name, FlatType.TWO_ROOM)
    coordinator.review_application(MANAGER_NRIC, app.application_no, True)
    coordinator.request_booking(SINGLE_NRIC)
    coordinator.book_flat(assigned_officer, app.application_no)
    return app.application_no
