"""
Typed Exception Hierarchy for the Housing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failed transition in the allocation core is surfaced to the caller
synchronously with a specific kind. Callers (the interactive shell, a web
front end, tests) branch on the exception TYPE and read structured
attributes, never the message text:

    try:
        coordinator.book_flat(officer_nric, application_no)
    except InsufficientInventoryError as e:
        show(f"No {e.flat_type} units left in {e.project_name}")
    except InvalidStateError as e:
        show(f"Application is {e.current_state}, cannot {e.action}")

Every exception class carries a ``code`` class attribute (machine-readable,
stable across message rewording).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from HousingKernelError:

    HousingKernelError (base)
    |
    +-- EntityNotFoundError
    |   +-- PersonNotFoundError
    |   +-- ProjectNotFoundError
    |   +-- ApplicationNotFoundError
    |   +-- RegistrationNotFoundError
    |
    +-- InvalidStateError
    |   +-- AlreadyReviewedError
    |
    +-- ApplicationError
    |   +-- DuplicateApplicationError
    |   +-- NotEligibleError
    |
    +-- InventoryError
    |   +-- InsufficientInventoryError
    |   +-- NoSlotsAvailableError
    |   +-- SlotLimitExceededError
    |
    +-- RegistrationError
    |   +-- RoleConflictError
    |   +-- OverlappingCommitmentError
    |   +-- DuplicateRegistrationError
    |
    +-- AuthorizationError
    |   +-- MissingRoleError
    |   +-- NotProjectOwnerError
    |   +-- NotAssignedOfficerError
    |
    +-- InvalidArgumentError
        +-- InvalidWindowError
        +-- InvalidNricError
        +-- PersonAlreadyExistsError
        +-- ProjectNameTakenError
        +-- ProjectWindowOverlapError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                    | When Raised
--------------|-------------------------|------------------------------------------
Not found     | PERSON_NOT_FOUND        | NRIC does not exist
              | PROJECT_NOT_FOUND       | Project name does not exist
              | APPLICATION_NOT_FOUND   | No (active) application for lookup key
              | REGISTRATION_NOT_FOUND  | Registration number does not exist
--------------|-------------------------|------------------------------------------
State         | INVALID_STATE           | Transition not allowed from current state
              | ALREADY_REVIEWED        | Registration is no longer PENDING
--------------|-------------------------|------------------------------------------
Application   | DUPLICATE_APPLICATION   | Applicant already holds an active one
              | NOT_ELIGIBLE            | Flat type not allowed for this applicant
--------------|-------------------------|------------------------------------------
Inventory     | INSUFFICIENT_INVENTORY  | Flat-type quota is zero
              | NO_SLOTS_AVAILABLE      | Officer-slot counter is zero
              | SLOT_LIMIT_EXCEEDED     | Officer-slot counter already at cap
--------------|-------------------------|------------------------------------------
Registration  | ROLE_CONFLICT           | Officer holds an active application
              | OVERLAPPING_COMMITMENT  | Approved registration window intersects
              | DUPLICATE_REGISTRATION  | Open registration for the same project
--------------|-------------------------|------------------------------------------
Authorization | MISSING_ROLE            | Actor lacks the role for the operation
              | NOT_PROJECT_OWNER       | Manager does not own the project
              | NOT_ASSIGNED_OFFICER    | Officer not approved for the project
--------------|-------------------------|------------------------------------------
Argument      | INVALID_ARGUMENT        | Negative counts and similar bad input
              | INVALID_WINDOW          | Close date before open date
              | INVALID_NRIC            | NRIC does not match the national format
              | PERSON_ALREADY_EXISTS   | NRIC already registered
              | PROJECT_NAME_TAKEN      | Project name already used
              | PROJECT_WINDOW_OVERLAP  | Manager already runs a project then

===============================================================================
"""


class HousingKernelError(Exception):
    """
    Base exception for all housing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "HOUSING_KERNEL_ERROR"


# Not-found exceptions


class EntityNotFoundError(HousingKernelError):
    """Base exception for references to absent entities."""

    code: str = "NOT_FOUND"


class PersonNotFoundError(EntityNotFoundError):
    """No person is registered under the given NRIC."""

    code: str = "PERSON_NOT_FOUND"

    def __init__(self, nric: str):
        self.nric = nric
        super().__init__(f"Person not found: {nric}")


class ProjectNotFoundError(EntityNotFoundError):
    """No project exists with the given name."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_name: str):
        self.project_name = project_name
        super().__init__(f"Project not found: {project_name}")


class ApplicationNotFoundError(EntityNotFoundError):
    """No application matches the lookup key."""

    code: str = "APPLICATION_NOT_FOUND"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Application not found: {key}")


class RegistrationNotFoundError(EntityNotFoundError):
    """No registration matches the lookup key."""

    code: str = "REGISTRATION_NOT_FOUND"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Registration not found: {key}")


# State machine exceptions


class InvalidStateError(HousingKernelError):
    """Transition attempted from a state that forbids it."""

    code: str = "INVALID_STATE"

    def __init__(self, entity: str, current_state: str, action: str, reason: str = ""):
        self.entity = entity
        self.current_state = current_state
        self.action = action
        self.reason = reason
        message = f"Cannot {action} {entity} in state {current_state}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AlreadyReviewedError(InvalidStateError):
    """Registration has already been approved or rejected."""

    code: str = "ALREADY_REVIEWED"

    def __init__(self, registration_no: int, current_state: str):
        self.registration_no = registration_no
        super().__init__(
            entity=f"registration {registration_no}",
            current_state=current_state,
            action="review",
            reason="already reviewed",
        )


# Application exceptions


class ApplicationError(HousingKernelError):
    """Base exception for application submission errors."""

    code: str = "APPLICATION_ERROR"


class DuplicateApplicationError(ApplicationError):
    """Applicant already holds an active application."""

    code: str = "DUPLICATE_APPLICATION"

    def __init__(self, nric: str, existing_application_no: int):
        self.nric = nric
        self.existing_application_no = existing_application_no
        super().__init__(
            f"Applicant {nric} already has active application "
            f"{existing_application_no}"
        )


class NotEligibleError(ApplicationError):
    """Applicant is not eligible for the requested flat type."""

    code: str = "NOT_ELIGIBLE"

    def __init__(self, nric: str, project_name: str, flat_type: str):
        self.nric = nric
        self.project_name = project_name
        self.flat_type = flat_type
        super().__init__(
            f"Applicant {nric} is not eligible for {flat_type} in {project_name}"
        )


# Inventory exceptions


class InventoryError(HousingKernelError):
    """Base exception for bounded inventory violations."""

    code: str = "INVENTORY_ERROR"


class InsufficientInventoryError(InventoryError):
    """No units of the flat type remain in the project."""

    code: str = "INSUFFICIENT_INVENTORY"

    def __init__(self, project_name: str, flat_type: str, available: int):
        self.project_name = project_name
        self.flat_type = flat_type
        self.available = available
        super().__init__(
            f"No {flat_type} units available in {project_name} "
            f"(available={available})"
        )


class NoSlotsAvailableError(InventoryError):
    """The project has no officer slots left."""

    code: str = "NO_SLOTS_AVAILABLE"

    def __init__(self, project_name: str):
        self.project_name = project_name
        super().__init__(f"No officer slots remaining on project {project_name}")


class SlotLimitExceededError(InventoryError):
    """Releasing a slot would push the counter past its cap."""

    code: str = "SLOT_LIMIT_EXCEEDED"

    def __init__(self, project_name: str, limit: int):
        self.project_name = project_name
        self.limit = limit
        super().__init__(
            f"Officer slots on project {project_name} already at limit {limit}"
        )


# Registration exceptions


class RegistrationError(HousingKernelError):
    """Base exception for officer registration errors."""

    code: str = "REGISTRATION_ERROR"


class RoleConflictError(RegistrationError):
    """An officer may not hold an active application and a registration at once.

    Raised with ``application_no`` when the officer tries to register, and
    with ``registration_no`` when a registered officer tries to apply.
    """

    code: str = "ROLE_CONFLICT"

    def __init__(
        self,
        nric: str,
        application_no: int | None = None,
        registration_no: int | None = None,
    ):
        self.nric = nric
        self.application_no = application_no
        self.registration_no = registration_no
        if registration_no is not None:
            message = (
                f"Officer {nric} holds registration {registration_no} "
                f"and cannot apply for a flat"
            )
        else:
            message = (
                f"Officer {nric} holds application {application_no} "
                f"and cannot register to administer a project"
            )
        super().__init__(message)


class OverlappingCommitmentError(RegistrationError):
    """Officer already administers a project in an intersecting window."""

    code: str = "OVERLAPPING_COMMITMENT"

    def __init__(
        self,
        nric: str,
        project_name: str,
        conflicting_project_name: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.nric = nric
        self.project_name = project_name
        self.conflicting_project_name = conflicting_project_name
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Officer {nric} is approved for {conflicting_project_name}, whose "
            f"window overlaps {project_name} from {overlap_start} to {overlap_end}"
        )


class DuplicateRegistrationError(RegistrationError):
    """Officer already has an open registration for the project."""

    code: str = "DUPLICATE_REGISTRATION"

    def __init__(self, nric: str, project_name: str, registration_no: int):
        self.nric = nric
        self.project_name = project_name
        self.registration_no = registration_no
        super().__init__(
            f"Officer {nric} already has registration {registration_no} "
            f"for {project_name}"
        )


# Authorization exceptions


class AuthorizationError(HousingKernelError):
    """Base exception for actors attempting operations they may not perform."""

    code: str = "AUTHORIZATION_ERROR"


class MissingRoleError(AuthorizationError):
    """Actor does not hold the role the operation requires."""

    code: str = "MISSING_ROLE"

    def __init__(self, nric: str, required_role: str):
        self.nric = nric
        self.required_role = required_role
        super().__init__(f"{nric} does not hold role {required_role}")


class NotProjectOwnerError(AuthorizationError):
    """Only the owning manager may administer the project."""

    code: str = "NOT_PROJECT_OWNER"

    def __init__(self, nric: str, project_name: str):
        self.nric = nric
        self.project_name = project_name
        super().__init__(f"Manager {nric} does not own project {project_name}")


class NotAssignedOfficerError(AuthorizationError):
    """Officer is not approved to administer the project."""

    code: str = "NOT_ASSIGNED_OFFICER"

    def __init__(self, nric: str, project_name: str):
        self.nric = nric
        self.project_name = project_name
        super().__init__(f"Officer {nric} is not assigned to project {project_name}")


# Argument exceptions


class InvalidArgumentError(HousingKernelError):
    """Malformed input such as negative counts."""

    code: str = "INVALID_ARGUMENT"

    def __init__(self, message: str):
        super().__init__(message)


class InvalidWindowError(InvalidArgumentError):
    """Close date falls before open date."""

    code: str = "INVALID_WINDOW"

    def __init__(self, open_date: str, close_date: str):
        self.open_date = open_date
        self.close_date = close_date
        super().__init__(
            f"Close date {close_date} cannot be before open date {open_date}"
        )


class InvalidNricError(InvalidArgumentError):
    """NRIC does not match the national identity format."""

    code: str = "INVALID_NRIC"

    def __init__(self, nric: str):
        self.nric = nric
        super().__init__(f"Invalid NRIC format: {nric!r}")


class PersonAlreadyExistsError(InvalidArgumentError):
    """A person with the NRIC is already registered."""

    code: str = "PERSON_ALREADY_EXISTS"

    def __init__(self, nric: str):
        self.nric = nric
        super().__init__(f"Person already exists: {nric}")


class ProjectNameTakenError(InvalidArgumentError):
    """Project names are unique across all managers."""

    code: str = "PROJECT_NAME_TAKEN"

    def __init__(self, project_name: str):
        self.project_name = project_name
        super().__init__(f"Project name already exists: {project_name}")


class ProjectWindowOverlapError(InvalidArgumentError):
    """Manager already owns a project whose window intersects the new one."""

    code: str = "PROJECT_WINDOW_OVERLAP"

    def __init__(
        self,
        manager_nric: str,
        project_name: str,
        existing_project_name: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.manager_nric = manager_nric
        self.project_name = project_name
        self.existing_project_name = existing_project_name
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Window of {project_name} overlaps existing project "
            f"{existing_project_name} from {overlap_start} to {overlap_end}"
        )
