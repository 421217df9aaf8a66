"""Services for the housing kernel (write side)."""

from housing_kernel.services.allocation_coordinator import (
    AllocationCoordinator,
    PersistListener,
)
from housing_kernel.services.application_service import ApplicationService
from housing_kernel.services.inventory_service import InventoryService
from housing_kernel.services.person_service import PersonService
from housing_kernel.services.project_service import ProjectService
from housing_kernel.services.registration_service import RegistrationService
from housing_kernel.services.sequence_service import SequenceService

__all__ = [
    "AllocationCoordinator",
    "ApplicationService",
    "InventoryService",
    "PersistListener",
    "PersonService",
    "ProjectService",
    "RegistrationService",
    "SequenceService",
]
