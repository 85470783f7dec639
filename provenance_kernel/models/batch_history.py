"""
Module: provenance_kernel.models.batch_history
Responsibility: ORM persistence for the per-batch, append-only audit trail.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - History entries are append-only; no UPDATE or DELETE (ORM listener).
    - (batch_id, position) is unique; position is 1-based insertion order.
    - entry_hash = H(batch_id | position | timestamp | action | from | to |
      actor | prev_hash).  Validated by HistoryLog.verify_chain.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE attempt.
    - IntegrityError on a duplicate (batch_id, position).
    - HistoryChainBrokenError when chain validation detects a mismatch.

Audit relevance:
    BatchHistoryEntry IS the provenance trail.  batch_id deliberately has
    no foreign key: when a merge deletes a batch its history stays
    readable.
"""

from sqlalchemy import BigInteger, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from provenance_kernel.db.base import Base
from provenance_kernel.domain.values import HistoryAction

__all__ = ["BatchHistoryEntry", "HistoryAction"]


class BatchHistoryEntry(Base):
    """
    One immutable lifecycle event of one batch.

    Guarantees:
        - position is contiguous from 1 within a batch.
        - prev_hash is None only for position 1.
    """

    __tablename__ = "batch_history"

    __table_args__ = (
        UniqueConstraint("batch_id", "position", name="uq_history_batch_position"),
        Index("idx_history_batch", "batch_id"),
        Index("idx_history_action", "action"),
    )

    batch_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    timestamp: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    action: Mapped[HistoryAction] = mapped_column(
        String(32),
        nullable=False,
    )

    from_ref: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    to_ref: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    # Principal that performed the operation
    actor: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    prev_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    entry_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )

    def __repr__(self) -> str:
        action = self.action.value if isinstance(self.action, HistoryAction) else self.action
        return f"<BatchHistoryEntry {self.batch_id}#{self.position} {action}>"
