"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  All concrete services inherit
    from BaseService, receiving a SQLAlchemy ``Session`` that they use
    via ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell around the pure lifecycles in
    ``housing_kernel/domain/``.

Invariants enforced:
    ATOMIC_TRANSITION -- services flush within the caller's transaction
    and never commit or rollback themselves.  The AllocationCoordinator
    (or a test harness) owns the savepoint and the commit.

Failure modes:
    - If a subclass calls ``session.commit()`` itself, a failure later in
      the same request can no longer be rolled back as a unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from housing_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide list/report queries -- those belong in
          ``housing_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
