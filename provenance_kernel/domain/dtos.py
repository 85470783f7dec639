"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable snapshots of batches and history entries handed out by the
    store, the history log, selectors and the outer service.  Callers never
    receive ORM rows, so nothing outside the services layer can mutate
    persisted state by accident.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods are boundary converters invoked from the
    service and selector layers only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from provenance_kernel.domain.values import BatchStatus, HistoryAction

if TYPE_CHECKING:
    from provenance_kernel.models.batch import Batch as BatchModel
    from provenance_kernel.models.batch_history import (
        BatchHistoryEntry as BatchHistoryEntryModel,
    )


@dataclass(frozen=True)
class BatchRecord:
    """Snapshot of a batch."""

    batch_id: int
    owner: str
    quantity: int
    origin: str
    harvest_date: int
    certifications: tuple[str, ...] = field(default_factory=tuple)
    status: BatchStatus = BatchStatus.PENDING

    @classmethod
    def from_model(cls, model: BatchModel) -> BatchRecord:
        return cls(
            batch_id=model.batch_id,
            owner=model.owner,
            quantity=model.quantity,
            origin=model.origin,
            harvest_date=model.harvest_date,
            certifications=tuple(model.certifications or ()),
            status=BatchStatus(model.status),
        )

    def evolve(self, **changes) -> BatchRecord:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "owner": self.owner,
            "quantity": self.quantity,
            "origin": self.origin,
            "harvest_date": self.harvest_date,
            "certifications": list(self.certifications),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class HistoryEntryRecord:
    """Snapshot of one history entry."""

    batch_id: int
    position: int
    timestamp: int
    action: HistoryAction
    from_ref: str | None
    to_ref: str | None
    actor: str
    prev_hash: str | None
    entry_hash: str

    @classmethod
    def from_model(cls, model: BatchHistoryEntryModel) -> HistoryEntryRecord:
        return cls(
            batch_id=model.batch_id,
            position=model.position,
            timestamp=model.timestamp,
            action=HistoryAction(model.action),
            from_ref=model.from_ref,
            to_ref=model.to_ref,
            actor=model.actor,
            prev_hash=model.prev_hash,
            entry_hash=model.entry_hash,
        )

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "action": self.action.value,
            "from": self.from_ref,
            "to": self.to_ref,
            "actor": self.actor,
        }
