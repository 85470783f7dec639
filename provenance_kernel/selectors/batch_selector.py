"""
Batch read queries.

Answers "what is batch N now", "what happened to batch N" and "which id
comes next" without touching the write path.  A batch absorbed by a merge
has no details but keeps its history.
"""

from sqlalchemy import func, select

from provenance_kernel.domain.dtos import BatchRecord, HistoryEntryRecord
from provenance_kernel.domain.validation import is_storable_batch_id
from provenance_kernel.domain.values import BatchStatus
from provenance_kernel.models.batch import Batch
from provenance_kernel.models.batch_history import BatchHistoryEntry
from provenance_kernel.models.sequence_counter import BATCH_ID_SEQUENCE, SequenceCounter
from provenance_kernel.selectors.base import BaseSelector


class BatchSelector(BaseSelector[Batch]):
    """Read-only access to batches and their histories."""

    def get_batch_details(self, batch_id: int) -> BatchRecord | None:
        if not is_storable_batch_id(batch_id):
            return None
        model = self.session.execute(
            select(Batch).where(Batch.batch_id == batch_id)
        ).scalar_one_or_none()
        return BatchRecord.from_model(model) if model is not None else None

    def get_batch_history(self, batch_id: int) -> tuple[HistoryEntryRecord, ...]:
        if not is_storable_batch_id(batch_id):
            return ()
        models = self.session.execute(
            select(BatchHistoryEntry)
            .where(BatchHistoryEntry.batch_id == batch_id)
            .order_by(BatchHistoryEntry.position)
        ).scalars().all()
        return tuple(HistoryEntryRecord.from_model(m) for m in models)

    def get_next_batch_id(self) -> int:
        current = self.session.execute(
            select(SequenceCounter.current_value).where(
                SequenceCounter.name == BATCH_ID_SEQUENCE
            )
        ).scalar_one_or_none()
        return (current or 0) + 1

    def list_batches(
        self,
        owner: str | None = None,
        status: BatchStatus | None = None,
    ) -> list[BatchRecord]:
        """Live batches ordered by id, optionally filtered."""
        query = select(Batch).order_by(Batch.batch_id)
        if owner is not None:
            query = query.where(Batch.owner == owner)
        if status is not None:
            query = query.where(Batch.status == status.value)
        return [BatchRecord.from_model(m) for m in self.session.execute(query).scalars()]

    def total_quantity(self, owner: str | None = None) -> int:
        query = select(func.coalesce(func.sum(Batch.quantity), 0))
        if owner is not None:
            query = query.where(Batch.owner == owner)
        return int(self.session.execute(query).scalar_one())
