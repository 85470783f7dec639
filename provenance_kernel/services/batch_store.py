"""
BatchStore -- the mapping from batch identifier to batch record.

Responsibility:
    Sole writer of ``batches`` rows.  Allocates identifiers through
    SequenceService, validates registration inputs, and offers full-record
    get / set / delete over BatchRecord DTOs.

Architecture position:
    Kernel > Services -- imperative shell.  Called by LifecycleEngine; read
    paths for outer layers live in selectors/batch_selector.py.

Invariants enforced:
    - Positive quantity: register and set refuse quantity <= 0.
    - Identifier never reused: ids come from the locked ``batch_id``
      counter, never from max(batch_id) + 1.
    - Provenance immutable: set() refuses to change origin / harvest_date
      (backed by the ORM listener in db/immutability.py).

Failure modes:
    - InsufficientQuantityError, InvalidMetadataError,
      CertificationCapacityError from register().
    - BatchAlreadyExistsError if an allocated id is occupied.
    - BatchNotFoundError from get / set / delete on an unknown id.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select

from provenance_kernel.domain.dtos import BatchRecord
from provenance_kernel.domain.validation import (
    is_storable_batch_id,
    validate_certifications,
    validate_harvest_date,
    validate_origin,
    validate_quantity,
)
from provenance_kernel.exceptions import (
    BatchAlreadyExistsError,
    BatchNotFoundError,
    ImmutabilityViolationError,
)
from provenance_kernel.logging_config import get_logger
from provenance_kernel.domain.values import BatchStatus
from provenance_kernel.models.batch import Batch
from provenance_kernel.services.base import BaseService
from provenance_kernel.services.sequence_service import SequenceService

logger = get_logger("services.batch_store")


class BatchStore(BaseService[Batch]):
    """
    Persistent batch records keyed by sequence-allocated identifiers.

    Contract:
        All public methods accept and return BatchRecord DTOs, never ORM
        rows.  Writes are flushed, never committed.
    """

    def __init__(self, session, sequence_service: SequenceService | None = None):
        super().__init__(session)
        self._sequences = sequence_service or SequenceService(session)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _find_model(self, batch_id: int) -> Batch | None:
        # Ids outside the column range cannot name a batch
        if not is_storable_batch_id(batch_id):
            return None
        return self.session.execute(
            select(Batch).where(Batch.batch_id == batch_id)
        ).scalar_one_or_none()

    def _get_model(self, batch_id: int) -> Batch:
        model = self._find_model(batch_id)
        if model is None:
            raise BatchNotFoundError(batch_id)
        return model

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, batch_id: int) -> BatchRecord | None:
        model = self._find_model(batch_id)
        return BatchRecord.from_model(model) if model else None

    def get(self, batch_id: int) -> BatchRecord:
        """
        Raises:
            BatchNotFoundError: If the id was never allocated or was merged away.
        """
        return BatchRecord.from_model(self._get_model(batch_id))

    def exists(self, batch_id: int) -> bool:
        return self._find_model(batch_id) is not None

    def next_batch_id(self) -> int:
        """The identifier the next registration or split will receive."""
        return self._sequences.peek_next(SequenceService.BATCH_ID)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register(
        self,
        owner: str,
        quantity: int,
        origin: str,
        harvest_date: int,
        certifications: Sequence[str] = (),
    ) -> int:
        """
        Validate and persist a new PENDING batch.

        Returns:
            The newly allocated batch id.
        """
        validate_quantity(quantity)
        validate_origin(origin)
        validate_harvest_date(harvest_date)
        validate_certifications(certifications)

        batch_id = self.allocate_id()
        self.create(
            BatchRecord(
                batch_id=batch_id,
                owner=owner,
                quantity=quantity,
                origin=origin,
                harvest_date=harvest_date,
                certifications=tuple(certifications),
                status=BatchStatus.PENDING,
            )
        )
        return batch_id

    def allocate_id(self) -> int:
        """Consume the next batch identifier."""
        return self._sequences.next_value(SequenceService.BATCH_ID)

    def create(self, record: BatchRecord) -> BatchRecord:
        """
        Insert a record under an already allocated id.

        Raises:
            BatchAlreadyExistsError: If the id is occupied.
        """
        if self.exists(record.batch_id):
            logger.error(
                "batch_id_collision",
                extra={"batch_id": record.batch_id},
            )
            raise BatchAlreadyExistsError(record.batch_id)

        validate_quantity(record.quantity)
        model = Batch(
            batch_id=record.batch_id,
            owner=record.owner,
            quantity=record.quantity,
            origin=record.origin,
            harvest_date=record.harvest_date,
            certifications=list(record.certifications),
            status=record.status.value,
        )
        self.session.add(model)
        self.session.flush()
        logger.debug(
            "batch_record_created",
            extra={"batch_id": record.batch_id, "quantity": record.quantity},
        )
        return record

    def set(self, batch_id: int, record: BatchRecord) -> BatchRecord:
        """
        Full-record replace of the mutable fields of a batch.

        Raises:
            BatchNotFoundError: If the batch does not exist.
            ImmutabilityViolationError: If the record changes provenance.
        """
        model = self._get_model(batch_id)
        if (
            record.batch_id != model.batch_id
            or record.origin != model.origin
            or record.harvest_date != model.harvest_date
        ):
            raise ImmutabilityViolationError(
                entity_type="Batch",
                entity_id=str(batch_id),
                reason="Provenance fields cannot change after registration",
            )
        validate_quantity(record.quantity)

        model.owner = record.owner
        model.quantity = record.quantity
        # Assign a new list so the JSON column registers the change
        model.certifications = list(record.certifications)
        model.status = record.status.value
        self.session.flush()
        return record

    def delete(self, batch_id: int) -> None:
        """
        Permanently remove a batch.  Its id is never handed out again.

        Raises:
            BatchNotFoundError: If the batch does not exist.
        """
        model = self._get_model(batch_id)
        self.session.delete(model)
        self.session.flush()
        logger.debug("batch_record_deleted", extra={"batch_id": batch_id})
