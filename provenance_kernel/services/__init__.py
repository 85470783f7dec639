"""Services for the provenance kernel (write side)."""

from provenance_kernel.services.batch_store import BatchStore
from provenance_kernel.services.history_log import HistoryLog
from provenance_kernel.services.lifecycle_engine import LifecycleEngine
from provenance_kernel.services.provenance_service import (
    OperationResult,
    ProvenanceLedgerService,
)
from provenance_kernel.services.sequence_service import SequenceService

__all__ = [
    "BatchStore",
    "HistoryLog",
    "LifecycleEngine",
    "OperationResult",
    "ProvenanceLedgerService",
    "SequenceService",
]
