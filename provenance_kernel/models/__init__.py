"""ORM models for the provenance kernel."""

from provenance_kernel.models.batch import VERIFIABLE_STATUSES, Batch, BatchStatus
from provenance_kernel.models.batch_history import BatchHistoryEntry, HistoryAction
from provenance_kernel.models.sequence_counter import SequenceCounter

__all__ = [
    "Batch",
    "BatchStatus",
    "VERIFIABLE_STATUSES",
    "BatchHistoryEntry",
    "HistoryAction",
    "SequenceCounter",
]
