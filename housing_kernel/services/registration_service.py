"""
RegistrationService -- persistence shell around the registration lifecycle.

Responsibility:
    Submits officer registrations and records the manager's review,
    reserving an officer slot on approval.

Architecture position:
    Kernel > Services.  Depends on PersonService, InventoryService,
    SequenceService and a Clock.  Assembled by AllocationCoordinator.

Invariants enforced:
    NO_ROLE_CONFLICT -- an officer holding an active application cannot
        register.
    NO_OVERLAPPING_COMMITMENT -- checked against the officer's APPROVED
        registrations at submission.
    OFFICER_SLOT_BOUNDS -- approval goes through InventoryService.

Failure modes:
    - PersonNotFoundError, ProjectNotFoundError, RegistrationNotFoundError.
    - RoleConflictError, DuplicateRegistrationError,
      OverlappingCommitmentError at submission.
    - AlreadyReviewedError, NoSlotsAvailableError at review.
    - MissingRoleError, NotProjectOwnerError.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from housing_kernel.domain import registration_lifecycle as lifecycle
from housing_kernel.domain.application_lifecycle import ACTIVE_STATUSES
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.dtos import RegistrationInfo
from housing_kernel.domain.registration_lifecycle import (
    RegistrationState,
    RegistrationStatus,
)
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import NotProjectOwnerError, RegistrationNotFoundError
from housing_kernel.logging_config import get_logger
from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.services.base import BaseService
from housing_kernel.services.inventory_service import InventoryService
from housing_kernel.services.person_service import PersonService
from housing_kernel.services.sequence_service import SequenceService

logger = get_logger("services.registration")


class RegistrationService(BaseService[RegistrationModel]):
    """Write side of officer registrations."""

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

    def _get(self, registration_no: int) -> RegistrationModel:
        registration = self.session.execute(
            select(RegistrationModel)
            .where(RegistrationModel.registration_no == registration_no)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if registration is None:
            raise RegistrationNotFoundError(str(registration_no))
        return registration

    def submit(self, officer_nric: str, project_name: str) -> RegistrationInfo:
        """
        Create a PENDING registration for ``officer_nric`` on ``project_name``.

        Raises:
            RoleConflictError: the officer holds an active application.
            DuplicateRegistrationError: a pending or approved registration
                for the same project exists.
            OverlappingCommitmentError: an approved registration's project
                window intersects this project's window.
        """
        officer = self._persons.require_role(officer_nric, Role.OFFICER)
        project = self._inventory.load_project(project_name, lock=False)

        active_no = self.session.execute(
            select(ApplicationModel.application_no).where(
                ApplicationModel.applicant_id == officer.id,
                ApplicationModel.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
        ).scalar_one_or_none()
        existing = self.session.execute(
            select(RegistrationModel).where(RegistrationModel.officer_id == officer.id)
        ).scalars().all()

        lifecycle.start(
            officer_nric,
            project.name,
            project.window,
            active_no,
            [r.commitment() for r in existing],
        )

        registration = RegistrationModel(
            registration_no=self._sequences.next_value(SequenceService.REGISTRATION),
            officer=officer,
            project=project,
            status=RegistrationStatus.PENDING.value,
            submitted_on=self._clock.today(),
            reviewed_on=None,
        )
        self.session.add(registration)
        self.session.flush()

        logger.info(
            "registration_submitted",
            extra={
                "registration_no": registration.registration_no,
                "officer_nric": officer_nric,
                "project_name": project.name,
            },
        )
        return registration.to_dto()

    def review(self, manager_nric: str, registration_no: int, approve: bool) -> RegistrationInfo:
        """
        Approve or reject a PENDING registration.

        Approval takes one officer slot; when none is left the registration
        stays PENDING and NoSlotsAvailableError propagates.
        """
        self._persons.require_role(manager_nric, Role.MANAGER)
        registration = self._get(registration_no)
        if registration.project.manager.nric != manager_nric:
            raise NotProjectOwnerError(manager_nric, registration.project.name)

        project = self._inventory.load_project(registration.project.name)
        state = RegistrationState(
            status=RegistrationStatus(registration.status),
            registration_no=registration.registration_no,
            reviewed_on=registration.reviewed_on,
        )
        step = lifecycle.review(state, approve, project.inventory_snapshot(), self._clock.today())

        if step.inventory is not None:
            self._inventory.apply(project, step.inventory, "officer_slot_reserved")
        registration.status = step.state.status.value
        registration.reviewed_on = step.state.reviewed_on
        self.session.flush()

        logger.info(
            "registration_approved" if approve else "registration_rejected",
            extra={
                "registration_no": registration.registration_no,
                "officer_nric": registration.officer.nric,
                "project_name": project.name,
                "officer_slots": project.officer_slots,
            },
        )
        return registration.to_dto()
