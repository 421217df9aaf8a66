"""
Value objects for the housing domain (``housing_kernel.domain.values``).

Responsibility
--------------
Enumerations and small immutable values shared by every layer: flat types,
marital status, the role set of a person, and inclusive date windows.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``DateWindow`` always satisfies ``open_date <= close_date``.
* Window overlap is inclusive on both ends: two windows that share a single
  day overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from housing_kernel.exceptions import InvalidWindowError


class FlatType(str, Enum):
    """Category of housing unit with its own quota and price per project."""

    TWO_ROOM = "two_room"
    THREE_ROOM = "three_room"

    @property
    def label(self) -> str:
        return {"two_room": "2-Room", "three_room": "3-Room"}[self.value]


class MaritalStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"


class Role(str, Enum):
    """Capabilities a person may hold.

    Roles compose: an officer holds ``{APPLICANT, OFFICER}`` and can still
    apply for a flat, which is what the registration role-conflict rule
    guards against.
    """

    APPLICANT = "applicant"
    OFFICER = "officer"
    MANAGER = "manager"


# Role sets issued at registration, keyed by the primary role.
ROLE_SETS: dict[Role, frozenset[Role]] = {
    Role.APPLICANT: frozenset({Role.APPLICANT}),
    Role.OFFICER: frozenset({Role.APPLICANT, Role.OFFICER}),
    Role.MANAGER: frozenset({Role.MANAGER}),
}


class ProjectSort(str, Enum):
    """Orderings offered when listing projects."""

    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    NEIGHBORHOOD_ASC = "neighborhood_asc"
    NEIGHBORHOOD_DESC = "neighborhood_desc"


@dataclass(frozen=True)
class DateWindow:
    """Inclusive application/registration period of a project."""

    open_date: date
    close_date: date

    def __post_init__(self) -> None:
        if self.close_date < self.open_date:
            raise InvalidWindowError(str(self.open_date), str(self.close_date))

    def overlaps(self, other: DateWindow) -> bool:
        """NOT (closeA < openB OR closeB < openA)."""
        return not (
            self.close_date < other.open_date or other.close_date < self.open_date
        )

    def intersection(self, other: DateWindow) -> DateWindow | None:
        if not self.overlaps(other):
            return None
        return DateWindow(
            max(self.open_date, other.open_date),
            min(self.close_date, other.close_date),
        )

    def contains(self, day: date) -> bool:
        return self.open_date <= day <= self.close_date

    def __str__(self) -> str:
        return f"[{self.open_date.isoformat()}, {self.close_date.isoformat()}]"
