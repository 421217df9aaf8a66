"""Selectors for the housing kernel (read side)."""

from housing_kernel.selectors.application_selector import ApplicationSelector
from housing_kernel.selectors.person_selector import PersonSelector
from housing_kernel.selectors.project_selector import ProjectSelector
from housing_kernel.selectors.registration_selector import RegistrationSelector

__all__ = [
    "ApplicationSelector",
    "PersonSelector",
    "ProjectSelector",
    "RegistrationSelector",
]
