"""
HistoryLog -- append-only, per-batch ordered audit trail.

Responsibility:
    Sole writer of ``batch_history`` rows.  Appends entries at the next
    position of a batch's sequence, links each entry into a per-batch hash
    chain, enforces the per-batch capacity, and reads sequences back in
    insertion order.

Architecture position:
    Kernel > Services -- imperative shell, called by LifecycleEngine.

Invariants enforced:
    - Append-only: entries are inserted, never updated or deleted (also
      blocked by ORM listeners on BatchHistoryEntry).
    - Insertion order: position = previous length + 1.
    - Capacity: at most MAX_HISTORY_ENTRIES per batch.  A full history
      raises HistoryCapacityError; nothing is ever dropped or truncated.
    - Chain: entry_hash = H(fields | prev_hash); prev_hash is None only for
      the first entry of a batch.

Failure modes:
    - HistoryCapacityError: the batch already has MAX_HISTORY_ENTRIES.
    - HistoryChainBrokenError: verify_chain found a mismatch.

Audit relevance:
    This IS the provenance trail.  A batch's history outlives the batch:
    after a merge deletes a batch its entries remain readable.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from provenance_kernel.domain.clock import Clock, SystemClock
from provenance_kernel.domain.dtos import HistoryEntryRecord
from provenance_kernel.domain.validation import MAX_HISTORY_ENTRIES, is_storable_batch_id
from provenance_kernel.exceptions import HistoryCapacityError, HistoryChainBrokenError
from provenance_kernel.logging_config import get_logger
from provenance_kernel.domain.values import HistoryAction
from provenance_kernel.models.batch_history import BatchHistoryEntry
from provenance_kernel.services.base import BaseService
from provenance_kernel.utils.hashing import hash_history_entry

logger = get_logger("services.history_log")


class HistoryLog(BaseService[BatchHistoryEntry]):
    """
    Per-batch append-only history.

    Contract:
        ``append`` is the only write path.  ``read_all`` returns an ordered
        tuple of HistoryEntryRecord DTOs and never mutates.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        capacity: int = MAX_HISTORY_ENTRIES,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def _last_model(self, batch_id: int) -> BatchHistoryEntry | None:
        return self.session.execute(
            select(BatchHistoryEntry)
            .where(BatchHistoryEntry.batch_id == batch_id)
            .order_by(BatchHistoryEntry.position.desc())
            .limit(1)
        ).scalar_one_or_none()

    def length(self, batch_id: int) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(BatchHistoryEntry)
            .where(BatchHistoryEntry.batch_id == batch_id)
        ).scalar_one()

    def ensure_capacity(self, batch_id: int, additional: int = 1) -> None:
        """
        Raise before any mutation if ``additional`` entries would not fit.

        Raises:
            HistoryCapacityError: If the batch history would exceed capacity.
        """
        if self.length(batch_id) + additional > self._capacity:
            raise HistoryCapacityError(batch_id, self._capacity)

    def append(
        self,
        batch_id: int,
        action: HistoryAction,
        actor: str,
        from_ref: str | None = None,
        to_ref: str | None = None,
    ) -> HistoryEntryRecord:
        """
        Append one entry to the end of a batch's history.

        Raises:
            HistoryCapacityError: If the history is already full.
        """
        last = self._last_model(batch_id)
        position = 1 if last is None else last.position + 1
        if position > self._capacity:
            raise HistoryCapacityError(batch_id, self._capacity)

        prev_hash = last.entry_hash if last is not None else None
        timestamp = self._clock.timestamp()
        entry_hash = hash_history_entry(
            batch_id=batch_id,
            position=position,
            timestamp=timestamp,
            action=action.value,
            from_ref=from_ref,
            to_ref=to_ref,
            actor=actor,
            prev_hash=prev_hash,
        )
        model = BatchHistoryEntry(
            batch_id=batch_id,
            position=position,
            timestamp=timestamp,
            action=action.value,
            from_ref=from_ref,
            to_ref=to_ref,
            actor=actor,
            prev_hash=prev_hash,
            entry_hash=entry_hash,
        )
        self.session.add(model)
        self.session.flush()

        logger.debug(
            "history_entry_appended",
            extra={
                "batch_id": batch_id,
                "position": position,
                "action": action,
            },
        )
        return HistoryEntryRecord.from_model(model)

    def read_all(self, batch_id: int) -> tuple[HistoryEntryRecord, ...]:
        """All entries of a batch in insertion order (empty if none)."""
        if not is_storable_batch_id(batch_id):
            return ()
        models = self.session.execute(
            select(BatchHistoryEntry)
            .where(BatchHistoryEntry.batch_id == batch_id)
            .order_by(BatchHistoryEntry.position)
        ).scalars().all()
        return tuple(HistoryEntryRecord.from_model(m) for m in models)

    def verify_chain(self, batch_id: int) -> bool:
        """
        Validate the hash chain of one batch.

        Postconditions:
            - Returns ``True`` only if every stored entry_hash matches its
              recomputed value, every prev_hash matches its predecessor, and
              positions are contiguous from 1.

        Raises:
            HistoryChainBrokenError: If chain validation fails at any point.
        """
        prev_hash: str | None = None
        for expected_position, entry in enumerate(self.read_all(batch_id), start=1):
            if entry.position != expected_position:
                logger.critical(
                    "history_chain_broken",
                    extra={"batch_id": batch_id, "position": entry.position},
                )
                raise HistoryChainBrokenError(
                    batch_id, entry.position, str(expected_position), str(entry.position)
                )

            if entry.prev_hash != prev_hash:
                logger.critical(
                    "history_chain_broken",
                    extra={"batch_id": batch_id, "position": entry.position},
                )
                raise HistoryChainBrokenError(
                    batch_id, entry.position, prev_hash or "None", entry.prev_hash or "None"
                )

            expected_hash = hash_history_entry(
                batch_id=entry.batch_id,
                position=entry.position,
                timestamp=entry.timestamp,
                action=entry.action.value,
                from_ref=entry.from_ref,
                to_ref=entry.to_ref,
                actor=entry.actor,
                prev_hash=entry.prev_hash,
            )
            if entry.entry_hash != expected_hash:
                logger.critical(
                    "history_chain_broken",
                    extra={"batch_id": batch_id, "position": entry.position},
                )
                raise HistoryChainBrokenError(
                    batch_id, entry.position, expected_hash, entry.entry_hash
                )
            prev_hash = entry.entry_hash

        return True
