"""Pure domain core: clock, ledger context, identity guard, validation, values, DTOs."""

from provenance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from provenance_kernel.domain.context import NULL_PRINCIPAL, LedgerContext
from provenance_kernel.domain.dtos import BatchRecord, HistoryEntryRecord
from provenance_kernel.domain.identity_guard import IdentityGuard
from provenance_kernel.domain.values import BatchStatus, HistoryAction

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "LedgerContext",
    "NULL_PRINCIPAL",
    "IdentityGuard",
    "BatchRecord",
    "HistoryEntryRecord",
    "BatchStatus",
    "HistoryAction",
]
