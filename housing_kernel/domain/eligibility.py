"""
Eligibility policy (``housing_kernel.domain.eligibility``).

Responsibility
--------------
Decides which flat types an applicant may apply for in a project.  Pure and
total: any input, including a missing age or an unrecognised marital status,
yields a (possibly empty) set and never raises.

Rules
-----
* married, age >= 21  -> {TWO_ROOM, THREE_ROOM} intersected with offered types
* single, age >= 35   -> {TWO_ROOM} intersected with offered types
* everyone else       -> empty
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Protocol

from housing_kernel.domain.values import FlatType, MaritalStatus

MARRIED_MIN_AGE = 21
SINGLE_MIN_AGE = 35

_MARRIED_TYPES = frozenset({FlatType.TWO_ROOM, FlatType.THREE_ROOM})
_SINGLE_TYPES = frozenset({FlatType.TWO_ROOM})

_NRIC_PATTERN = re.compile(r"^[ST]\d{7}[A-Z]$")


class EligibilitySubject(Protocol):
    age: Any
    marital_status: Any


class OfferingProject(Protocol):
    @property
    def offered_flat_types(self) -> frozenset[FlatType]: ...


def _coerce_status(value: Any) -> MaritalStatus | None:
    if isinstance(value, MaritalStatus):
        return value
    if isinstance(value, str):
        try:
            return MaritalStatus(value.strip().lower())
        except ValueError:
            return None
    return None


def _coerce_offered(project: OfferingProject | Iterable[FlatType] | None) -> frozenset[FlatType]:
    if project is None:
        return frozenset()
    offered = getattr(project, "offered_flat_types", project)
    return frozenset(t for t in offered if isinstance(t, FlatType))


def eligible_flat_types(
    applicant: EligibilitySubject | None,
    project: OfferingProject | Iterable[FlatType] | None,
) -> frozenset[FlatType]:
    """Flat types ``applicant`` may apply for in ``project``."""
    if applicant is None:
        return frozenset()
    status = _coerce_status(getattr(applicant, "marital_status", None))
    age = getattr(applicant, "age", None)
    if status is None or not isinstance(age, int) or isinstance(age, bool):
        return frozenset()

    if status is MaritalStatus.MARRIED and age >= MARRIED_MIN_AGE:
        allowed = _MARRIED_TYPES
    elif status is MaritalStatus.SINGLE and age >= SINGLE_MIN_AGE:
        allowed = _SINGLE_TYPES
    else:
        return frozenset()
    return allowed & _coerce_offered(project)


def is_eligible(
    applicant: EligibilitySubject | None,
    project: OfferingProject | Iterable[FlatType] | None,
) -> bool:
    return bool(eligible_flat_types(applicant, project))


def is_valid_nric(nric: Any) -> bool:
    """S or T, seven digits, one uppercase letter (e.g. ``S1234567A``)."""
    return isinstance(nric, str) and _NRIC_PATTERN.match(nric) is not None
