"""ORM models for the housing kernel."""

from housing_kernel.models.application import ApplicationModel
from housing_kernel.models.person import Person, PersonRole
from housing_kernel.models.project import FlatInventoryModel, ProjectModel
from housing_kernel.models.registration import RegistrationModel
from housing_kernel.models.sequence import SequenceCounter

__all__ = [
    "Person",
    "PersonRole",
    "ProjectModel",
    "FlatInventoryModel",
    "ApplicationModel",
    "RegistrationModel",
    "SequenceCounter",
]
