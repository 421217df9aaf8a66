"""
Module: housing_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the kernel: listings, lookups and the booking report,
    with no mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/ (for DTOs and pure policies).  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), session.delete(),
      session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, never ORM
      instances.
    - Session ownership: the caller owns the session and its transaction.

Failure modes:
    - EntityNotFoundError subclasses from ``get``-style lookups; ``find``-style
      lookups return None instead.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from housing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session
