"""
SequenceService -- monotonic identifier allocation via locked counter rows.

Responsibility:
    Provides strictly monotonically increasing sequence numbers for batch
    identifiers.  Uses a dedicated counter table with row-level locking
    (``SELECT ... FOR UPDATE`` where the backend supports it).

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by BatchStore for every new batch (registration and split).

Invariants enforced:
    Identifier never reused -- the locked counter row is the sole source of
    truth for the next value.  The aggregate-max-plus-one anti-pattern is
    FORBIDDEN: after a merge deletes the highest batch, max+1 would hand its
    id out again.
    Transactional -- the increment is only visible after the caller's
    transaction commits.  Rollback returns the value.

Audit relevance:
    Sequence allocation is logged at DEBUG level with sequence_name and value.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from provenance_kernel.logging_config import get_logger
from provenance_kernel.models.sequence_counter import BATCH_ID_SEQUENCE, SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Guarantees:
        - Strictly monotonic values starting at 1 per sequence name.
        - Gap-safe: a rolled-back transaction does not consume a value.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT resolve concurrent first-use races; execution is
          sequential by contract of the host.

    Usage:
        seq = SequenceService(session).next_value(SequenceService.BATCH_ID)
    """

    # Well-known sequence names
    BATCH_ID = BATCH_ID_SEQUENCE

    def __init__(self, session: Session):
        self._session = session

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Allocate the next value for a named sequence.

        Postconditions:
            - Returns an integer > 0 strictly greater than any previously
              returned value for this sequence name.

        Args:
            sequence_name: Name of the sequence.

        Returns:
            The next sequence value (always > 0).
        """
        counter = self._locked_counter(sequence_name)
        if counter is None:
            counter = SequenceCounter(name=sequence_name, current_value=0)
            self._session.add(counter)

        counter.current_value += 1
        assert counter.current_value > 0, "sequence value must be strictly positive"
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int:
        """
        Get the last allocated value without incrementing (0 if none).
        """
        counter = self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()

        return counter.current_value if counter else 0

    def peek_next(self, sequence_name: str) -> int:
        """The value the next ``next_value`` call would return."""
        return self.current_value(sequence_name) + 1
