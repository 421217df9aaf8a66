"""
AllocationCoordinator -- single entry point for allocation requests.

Responsibility:
    Assembles the kernel services with explicit constructor injection and
    runs every request (submit/review application, request booking, book
    flat, request/review withdrawal, submit/review registration, project
    administration) as one all-or-nothing unit:

        1. bind request fields into LogContext
        2. open a SAVEPOINT
        3. call the service, which loads rows, runs the pure lifecycle step
           and writes the step plus its inventory delta
        4. release the savepoint and commit (the persist signal)
        5. notify persist listeners

    Any exception in step 3 rolls the savepoint back, so no partial
    mutation is ever visible, and is re-raised unchanged.

Architecture position:
    Kernel > Services -- imperative shell, outermost kernel layer.

Invariants enforced:
    ATOMIC_TRANSITION -- the savepoint around each request.

Failure modes:
    - Every HousingKernelError raised by a service is logged at WARNING
      with its code and re-raised.  Nothing is retried.
    - Unexpected exceptions are logged at ERROR and re-raised.
    - Persist listeners run after commit; an exception from a listener
      propagates to the caller but the transition is already committed.
"""

from __future__ import annotations

import time
from datetime import date
from typing import Any, Callable, Iterable, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.dtos import (
    ApplicationInfo,
    PersonInfo,
    ProjectInfo,
    Receipt,
    RegistrationInfo,
    WithdrawalReviewResult,
)
from housing_kernel.domain.values import FlatType, MaritalStatus, Role
from housing_kernel.exceptions import HousingKernelError
from housing_kernel.logging_config import LogContext, get_logger
from housing_kernel.services.application_service import ApplicationService
from housing_kernel.services.inventory_service import InventoryService
from housing_kernel.services.person_service import PersonService
from housing_kernel.services.project_service import ProjectService
from housing_kernel.services.registration_service import RegistrationService
from housing_kernel.services.sequence_service import SequenceService

logger = get_logger("services.allocation_coordinator")

T = TypeVar("T")

# Called with the request name and its result after every commit.
PersistListener = Callable[[str, Any], None]


class AllocationCoordinator:
    """
    Facade over the application, registration and project services.

    Contract:
        One public method per request.  Each returns a frozen DTO (or a
        Receipt / WithdrawalReviewResult) and either fully applies its
        effect or raises with nothing applied.

    Guarantees:
        - Services never commit; this class owns the commit when
          ``auto_commit`` is True.  With ``auto_commit=False`` the caller
          commits, and each request is still isolated by its savepoint.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        auto_commit: bool = True,
        persist_listeners: Iterable[PersistListener] = (),
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit
        self._listeners: list[PersistListener] = list(persist_listeners)

        self.persons = PersonService(session)
        self.inventory = InventoryService(session)
        self.sequences = SequenceService(session)
        self.projects = ProjectService(session, self.persons, self.inventory)
        self.applications = ApplicationService(
            session, self.persons, self.inventory, self.sequences, self._clock
        )
        self.registrations = RegistrationService(
            session, self.persons, self.inventory, self.sequences, self._clock
        )

    def add_persist_listener(self, listener: PersistListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Request runner
    # ------------------------------------------------------------------

    def _run(
        self,
        request: str,
        actor_nric: str | None,
        action: Callable[[], T],
        project_name: str | None = None,
        application_no: int | None = None,
    ) -> T:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=actor_nric,
            request=request,
            project_name=project_name,
            application_no=application_no,
        ):
            logger.info("request_started")
            t0 = time.monotonic()
            try:
                with self._session.begin_nested():
                    result = action()
            except HousingKernelError as exc:
                logger.warning(
                    "request_rejected",
                    extra={
                        "error_code": exc.code,
                        "error": str(exc),
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    },
                )
                raise
            except Exception:
                logger.error(
                    "request_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise

            if self._auto_commit:
                self._session.commit()

            logger.info(
                "request_completed",
                extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
            )
            for listener in self._listeners:
                listener(request, result)
            return result

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------

    def register_person(
        self,
        nric: str,
        name: str,
        age: int,
        marital_status: MaritalStatus | str,
        role: Role = Role.APPLICANT,
    ) -> PersonInfo:
        return self._run(
            "register_person",
            nric,
            lambda: self.persons.register(nric, name, age, marital_status, role),
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(
        self,
        manager_nric: str,
        name: str,
        neighborhood: str,
        open_date: date,
        close_date: date,
        units: dict[FlatType, int],
        prices: dict[FlatType, int] | None = None,
        officer_slots: int = 10,
        visible: bool = True,
    ) -> ProjectInfo:
        return self._run(
            "create_project",
            manager_nric,
            lambda: self.projects.create_project(
                manager_nric, name, neighborhood, open_date, close_date,
                units, prices, officer_slots, visible,
            ),
            project_name=name,
        )

    def edit_project(self, manager_nric: str, project_name: str, **changes: Any) -> ProjectInfo:
        return self._run(
            "edit_project",
            manager_nric,
            lambda: self.projects.edit_project(manager_nric, project_name, **changes),
            project_name=project_name,
        )

    def toggle_visibility(self, manager_nric: str, project_name: str) -> ProjectInfo:
        return self._run(
            "toggle_visibility",
            manager_nric,
            lambda: self.projects.toggle_visibility(manager_nric, project_name),
            project_name=project_name,
        )

    def add_units(
        self, manager_nric: str, project_name: str, flat_type: FlatType, count: int
    ) -> ProjectInfo:
        return self._run(
            "add_units",
            manager_nric,
            lambda: self.projects.add_units(manager_nric, project_name, flat_type, count),
            project_name=project_name,
        )

    def delete_project(self, manager_nric: str, project_name: str) -> None:
        return self._run(
            "delete_project",
            manager_nric,
            lambda: self.projects.delete_project(manager_nric, project_name),
            project_name=project_name,
        )

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def submit_application(
        self, applicant_nric: str, project_name: str, flat_type: FlatType
    ) -> ApplicationInfo:
        return self._run(
            "submit_application",
            applicant_nric,
            lambda: self.applications.submit(applicant_nric, project_name, flat_type),
            project_name=project_name,
        )

    def review_application(
        self, manager_nric: str, application_no: int, approve: bool
    ) -> ApplicationInfo:
        return self._run(
            "review_application",
            manager_nric,
            lambda: self.applications.review(manager_nric, application_no, approve),
            application_no=application_no,
        )

    def request_booking(self, applicant_nric: str) -> ApplicationInfo:
        return self._run(
            "request_booking",
            applicant_nric,
            lambda: self.applications.request_booking(applicant_nric),
        )

    def book_flat(self, officer_nric: str, application_no: int) -> Receipt:
        return self._run(
            "book_flat",
            officer_nric,
            lambda: self.applications.book_flat(officer_nric, application_no),
            application_no=application_no,
        )

    def request_withdrawal(self, applicant_nric: str) -> ApplicationInfo:
        return self._run(
            "request_withdrawal",
            applicant_nric,
            lambda: self.applications.request_withdrawal(applicant_nric),
        )

    def review_withdrawal(
        self, manager_nric: str, application_no: int, approve: bool
    ) -> WithdrawalReviewResult:
        return self._run(
            "review_withdrawal",
            manager_nric,
            lambda: self.applications.review_withdrawal(manager_nric, application_no, approve),
            application_no=application_no,
        )

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------

    def submit_registration(self, officer_nric: str, project_name: str) -> RegistrationInfo:
        return self._run(
            "submit_registration",
            officer_nric,
            lambda: self.registrations.submit(officer_nric, project_name),
            project_name=project_name,
        )

    def review_registration(
        self, manager_nric: str, registration_no: int, approve: bool
    ) -> RegistrationInfo:
        return self._run(
            "review_registration",
            manager_nric,
            lambda: self.registrations.review(manager_nric, registration_no, approve),
        )
