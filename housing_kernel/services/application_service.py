"""
ApplicationService -- persistence shell around the application lifecycle.

Responsibility:
    Loads the rows a transition needs, asks the pure functions in
    ``domain.application_lifecycle`` for the next step, writes the step's
    state onto the application row and hands any inventory effect to
    InventoryService.

Architecture position:
    Kernel > Services.  Depends on PersonService, InventoryService,
    SequenceService and a Clock.  Assembled by AllocationCoordinator.

Invariants enforced:
    SINGLE_ACTIVE_APPLICATION -- lookup of the applicant's active
        application before insert (partial unique index as backstop).
    NO_ROLE_CONFLICT -- an officer with an open registration cannot apply.
    Quota is checked at review and consumed at booking; an approved
    withdrawal of a booked flat returns the unit.

Failure modes:
    - PersonNotFoundError, ProjectNotFoundError, ApplicationNotFoundError.
    - DuplicateApplicationError, NotEligibleError, RoleConflictError.
    - InvalidStateError for any transition the current status forbids.
    - InsufficientInventoryError at review or booking.
    - MissingRoleError, NotProjectOwnerError, NotAssignedOfficerError.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from housing_kernel.domain import application_lifecycle as lifecycle
from housing_kernel.domain.application_lifecycle import (
    ACTIVE_STATUSES,
    ApplicationState,
    ApplicationStatus,
    ApplicationStep,
)
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.dtos import ApplicationInfo, Receipt, WithdrawalReviewResult
from housing_kernel.domain.registration_lifecycle import OPEN_STATUSES, RegistrationStatus
from housing_kernel.domain.values import FlatType, Role
from housing_kernel.exceptions import (
    ApplicationNotFoundError,
    NotAssignedOfficerError,
    NotProjectOwnerError,
    RoleConflictError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.person import Person
from housing_kernel.models.project import ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.services.base import BaseService
from housing_kernel.services.inventory_service import InventoryService
from housing_kernel.services.person_service import PersonService
from housing_kernel.services.sequence_service import SequenceService

logger = get_logger("services.application")


class ApplicationService(BaseService[ApplicationModel]):
    """
    Write side of housing applications.

    Contract:
        Every command validates through the pure lifecycle first; rows are
        only written once the step has been computed, so a raised error
        leaves nothing to undo inside this service.
    """

    def __init__(
        self,
        session: Session,
        persons: PersonService,
        inventory: InventoryService,
        sequences: SequenceService,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._persons = persons
        self._inventory = inventory
        self._sequences = sequences
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def active_model(self, person: Person) -> ApplicationModel | None:
        return self.session.execute(
            select(ApplicationModel).where(
                ApplicationModel.applicant_id == person.id,
                ApplicationModel.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        ).scalar_one_or_none()

    def _get(self, application_no: int) -> ApplicationModel:
        app = self.session.execute(
            select(ApplicationModel)
            .where(ApplicationModel.application_no == application_no)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if app is None:
            raise ApplicationNotFoundError(str(application_no))
        return app

    def _get_active_for(self, applicant_nric: str) -> ApplicationModel:
        person = self._persons.require_role(applicant_nric, Role.APPLICANT)
        app = self.active_model(person)
        if app is None:
            raise ApplicationNotFoundError(f"active application of {applicant_nric}")
        return app

    def _owned(self, manager_nric: str, app: ApplicationModel) -> None:
        self._persons.require_role(manager_nric, Role.MANAGER)
        if app.project.manager.nric != manager_nric:
            raise NotProjectOwnerError(manager_nric, app.project.name)

    @staticmethod
    def _state(app: ApplicationModel) -> ApplicationState:
        return ApplicationState(
            status=ApplicationStatus(app.status),
            withdrawal_requested=app.withdrawal_requested,
            application_no=app.application_no,
        )

    def _write(self, app: ApplicationModel, step: ApplicationStep) -> None:
        app.status = step.state.status.value
        app.withdrawal_requested = step.state.withdrawal_requested
        self.session.flush()

    def _log_step(self, event: str, app: ApplicationModel, step: ApplicationStep) -> None:
        logger.info(
            event,
            extra={
                "application_no": app.application_no,
                "project_name": app.project.name,
                "flat_type": app.flat_type,
                "from_status": step.previous.status.value,
                "to_status": step.state.status.value,
                "withdrawal_requested": step.state.withdrawal_requested,
            },
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(self, applicant_nric: str, project_name: str, flat_type: FlatType) -> ApplicationInfo:
        """
        Create a PENDING application.  No inventory is touched.

        Raises:
            DuplicateApplicationError: the applicant already has an active one.
            NotEligibleError: flat type not offered or not allowed.
            RoleConflictError: an officer with an open registration applies.
        """
        person = self._persons.require_role(applicant_nric, Role.APPLICANT)
        project = self._inventory.load_project(project_name, lock=False)
        active = self.active_model(person)

        lifecycle.start(
            applicant_nric,
            person.to_dto(),
            project.inventory_snapshot(),
            flat_type,
            active.application_no if active is not None else None,
        )

        if Role.OFFICER.value in person.role_values:
            registration = self.session.execute(
                select(RegistrationModel).where(
                    RegistrationModel.officer_id == person.id,
                    RegistrationModel.status.in_([s.value for s in OPEN_STATUSES]),
                )
            ).scalars().first()
            if registration is not None:
                raise RoleConflictError(
                    applicant_nric, registration_no=registration.registration_no
                )

        app = ApplicationModel(
            application_no=self._sequences.next_value(SequenceService.APPLICATION),
            applicant=person,
            project=project,
            flat_type=flat_type.value,
            status=ApplicationStatus.PENDING.value,
            withdrawal_requested=False,
            submitted_at=self._clock.now(),
        )
        self.session.add(app)
        self.session.flush()

        logger.info(
            "application_submitted",
            extra={
                "application_no": app.application_no,
                "applicant_nric": applicant_nric,
                "project_name": project.name,
                "flat_type": flat_type.value,
            },
        )
        return app.to_dto()

    def review(self, manager_nric: str, application_no: int, approve: bool) -> ApplicationInfo:
        """Approve (quota must be above zero) or reject a PENDING application."""
        app = self._get(application_no)
        self._owned(manager_nric, app)
        flat_type = FlatType(app.flat_type)
        snapshot = self._inventory.load_project(app.project.name).inventory_snapshot()

        step = lifecycle.review(self._state(app), approve, snapshot, flat_type)
        self._write(app, step)
        self._log_step("application_approved" if approve else "application_rejected", app, step)
        return app.to_dto()

    def request_booking(self, applicant_nric: str) -> ApplicationInfo:
        app = self._get_active_for(applicant_nric)
        step = lifecycle.request_booking(self._state(app))
        self._write(app, step)
        self._log_step("booking_requested", app, step)
        return app.to_dto()

    def book_flat(self, officer_nric: str, application_no: int) -> Receipt:
        """
        Book the flat of a PENDING_BOOKING application and issue a receipt.

        The quota is re-checked here; units may have been taken by other
        bookings since the application was approved.

        Raises:
            NotAssignedOfficerError: officer is not approved for the project.
            InvalidStateError: application is not PENDING_BOOKING.
            InsufficientInventoryError: no unit of the flat type remains.
        """
        officer = self._persons.require_role(officer_nric, Role.OFFICER)
        app = self._get(application_no)
        self._require_assigned(officer, app.project)

        project = self._inventory.load_project(app.project.name)
        flat_type = FlatType(app.flat_type)
        step = lifecycle.book(self._state(app), project.inventory_snapshot(), flat_type)

        self._inventory.apply(project, step.inventory, "flat_booked")
        self._write(app, step)
        self._log_step("flat_booked", app, step)

        applicant = app.applicant
        return Receipt(
            application_no=app.application_no,
            applicant_nric=applicant.nric,
            applicant_name=applicant.name,
            applicant_age=applicant.age,
            applicant_marital_status=applicant.to_dto().marital_status,
            project_name=project.name,
            neighborhood=project.neighborhood,
            flat_type=flat_type,
            issued_by_nric=officer.nric,
            issued_by_name=officer.name,
            issued_at=self._clock.now(),
        )

    def _require_assigned(self, officer: Person, project: ProjectModel) -> None:
        assigned = self.session.execute(
            select(RegistrationModel.id).where(
                RegistrationModel.officer_id == officer.id,
                RegistrationModel.project_id == project.id,
                RegistrationModel.status == RegistrationStatus.APPROVED.value,
            )
        ).first()
        if assigned is None:
            raise NotAssignedOfficerError(officer.nric, project.name)

    def request_withdrawal(self, applicant_nric: str) -> ApplicationInfo:
        app = self._get_active_for(applicant_nric)
        step = lifecycle.request_withdrawal(self._state(app))
        self._write(app, step)
        self._log_step("withdrawal_requested", app, step)
        return app.to_dto()

    def review_withdrawal(
        self, manager_nric: str, application_no: int, approve: bool
    ) -> WithdrawalReviewResult:
        """
        Decide a withdrawal request.

        Approval ends the application (returning the unit if it was booked).
        Rejection changes nothing and is reported as ``declined``.
        """
        app = self._get(application_no)
        self._owned(manager_nric, app)
        project = self._inventory.load_project(app.project.name)
        flat_type = FlatType(app.flat_type)

        step = lifecycle.review_withdrawal(
            self._state(app), approve, project.inventory_snapshot(), flat_type
        )
        if step.declined:
            logger.info(
                "withdrawal_declined",
                extra={
                    "application_no": app.application_no,
                    "project_name": project.name,
                    "status": app.status,
                },
            )
            return WithdrawalReviewResult(application=app.to_dto(), approved=False)

        released = 0
        if step.inventory is not None:
            self._inventory.apply(project, step.inventory, "withdrawal_approved")
            released = 1
        self._write(app, step)
        self._log_step("withdrawal_approved", app, step)
        return WithdrawalReviewResult(
            application=app.to_dto(), approved=True, units_released=released
        )
