"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Issues application and registration numbers.  Each named sequence is a
    row in ``sequence_counters`` that is locked (``SELECT ... FOR UPDATE``)
    and incremented; the numbered tables are never scanned for their
    maximum.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by ApplicationService and RegistrationService.

Invariants enforced:
    - Numbers are strictly increasing per sequence.
    - Allocation is transactional: if the caller's savepoint rolls back,
      the number is returned and will be issued again.

Failure modes:
    - IntegrityError: concurrent creation of the same counter row (handled
      via savepoint rollback and re-read).
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from housing_kernel.logging_config import get_logger
from housing_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Contract:
        Accepts a sequence name and returns the next strictly-monotonic
        integer value.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        with session.begin_nested():
            application_no = sequences.next_value(SequenceService.APPLICATION)
    """

    # Well-known sequence names
    APPLICATION = "application"
    REGISTRATION = "registration"

    def __init__(self, session: Session):
        self._session = session

    def _locked(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        Postconditions:
            - Returns an integer > 0 strictly greater than any value
              previously returned for this name in committed work.
        """
        counter = self._locked(sequence_name)

        if counter is None:
            # First use of this sequence.  The savepoint keeps a lost
            # creation race from rolling back the caller's other work.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._locked(sequence_name)
                if counter is None:
                    raise

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int | None:
        """Current value of a sequence without incrementing, or None if unused."""
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()
        return counter.current_value if counter else None

    def seed(self, sequence_name: str, minimum: int) -> None:
        """
        Raise a sequence so the next value issued is above ``minimum``.

        Used when importing records that already carry numbers: the counter
        resumes after the highest imported number.  Never lowers a counter.
        """
        counter = self._locked(sequence_name)
        if counter is None:
            self._session.add(SequenceCounter(name=sequence_name, current_value=minimum))
        elif counter.current_value < minimum:
            counter.current_value = minimum
        self._session.flush()
