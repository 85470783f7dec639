"""
Module: provenance_kernel.models.batch
Responsibility: ORM persistence for batches -- tracked quantities of a
    physical good with provenance metadata and a compliance status.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - quantity > 0 (ck_batch_quantity_positive; also validated upstream).
    - batch_id is unique and never reused (uq_batch_id; allocated by
      SequenceService, never by max+1).
    - origin, harvest_date and batch_id are immutable after registration
      (ORM listener in db/immutability.py).

Failure modes:
    - IntegrityError on duplicate batch_id or non-positive quantity if a
      caller bypasses BatchStore.
    - ImmutabilityViolationError when provenance fields are changed.

Audit relevance:
    Batch is the current-state projection; the BatchHistoryEntry rows are
    the audit trail explaining how it got there.
"""

from sqlalchemy import JSON, BigInteger, CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from provenance_kernel.db.base import TrackedBase
from provenance_kernel.domain.values import VERIFIABLE_STATUSES, BatchStatus

__all__ = ["Batch", "BatchStatus", "VERIFIABLE_STATUSES"]


class Batch(TrackedBase):
    """
    A registered batch.

    Contract:
        Each Batch has a unique, sequence-allocated batch_id.  Mutable
        fields are owner, quantity, certifications and status; everything
        else is fixed at registration.  Rows are written only by BatchStore.

    Guarantees:
        - quantity is strictly positive.
        - certifications is an ordered list of at most 10 tokens.

    Non-goals:
        - This model does NOT validate text bounds or capacity; that is the
          responsibility of BatchStore / domain.validation.
    """

    __tablename__ = "batches"

    __table_args__ = (
        UniqueConstraint("batch_id", name="uq_batch_id"),
        CheckConstraint("quantity > 0", name="ck_batch_quantity_positive"),
        Index("idx_batch_owner", "owner"),
        Index("idx_batch_status", "status"),
    )

    # Business identifier (1, 2, 3, ...)
    batch_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    owner: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    origin: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
    )

    # Caller-supplied timestamp or block height
    harvest_date: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    certifications: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    status: Mapped[BatchStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BatchStatus.PENDING,
    )

    def __repr__(self) -> str:
        return f"<Batch {self.batch_id} qty={self.quantity} owner={self.owner}>"
