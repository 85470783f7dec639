"""
LifecycleEngine -- register / transfer / split / merge / verify.

Responsibility:
    Orchestrates every batch lifecycle operation as one unit combining
    BatchStore mutation(s) and HistoryLog append(s).  Owns no persistent
    state; role and pause state arrive explicitly in a LedgerContext on
    every call.

Architecture position:
    Kernel > Services -- imperative shell.  Called by
    ProvenanceLedgerService, which owns the transaction boundary.

Operation flow (every operation):
    1. Pause check (OperationsPausedError) -- always first
    2. Role / existence / ownership / argument checks
    3. Capacity checks on every history that will be appended to
    4. Mutations (flush only)
    5. History appends (flush only)

Invariants enforced:
    - Atomicity: steps 1-3 raise before any write, so a refused operation
      leaves no trace even without a rollback.  Unexpected failures during
      steps 4-5 are undone by the caller's rollback.
    - Split conservation: remaining + split_quantity == original quantity.
    - Merge conservation: merged quantity == q1 + q2; absorbed batch deleted.
    - Status: only verify_compliance changes status, and only to VERIFIED
      or INVALID.  INVALID blocks transfer, nothing else.

Failure modes:
    - See provenance_kernel.exceptions; every refusal is a typed
      ProvenanceKernelError subclass.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from provenance_kernel.domain.clock import Clock, SystemClock
from provenance_kernel.domain.context import LedgerContext
from provenance_kernel.domain.dtos import BatchRecord
from provenance_kernel.domain.identity_guard import IdentityGuard
from provenance_kernel.domain.validation import (
    MAX_CERTIFICATIONS,
    validate_certification,
    validate_certifications,
    validate_harvest_date,
    validate_origin,
    validate_merged_quantity,
    validate_quantity,
    validate_split_quantity,
)
from provenance_kernel.exceptions import (
    BatchStatusConflictError,
    CertificationCapacityError,
    InvalidStatusTargetError,
    MergeMismatchError,
    NotOwnerError,
    SelfMergeError,
)
from provenance_kernel.logging_config import get_logger
from provenance_kernel.domain.values import VERIFIABLE_STATUSES, BatchStatus, HistoryAction
from provenance_kernel.services.batch_store import BatchStore
from provenance_kernel.services.history_log import HistoryLog

logger = get_logger("services.lifecycle_engine")


def _require_owner(batch: BatchRecord, caller: str) -> None:
    if batch.owner != caller:
        raise NotOwnerError(batch.batch_id, caller, batch.owner)


def _coerce_status(value: BatchStatus | str) -> BatchStatus:
    if isinstance(value, BatchStatus):
        return value
    try:
        return BatchStatus(value)
    except (TypeError, ValueError):
        raise InvalidStatusTargetError(str(value)) from None


class LifecycleEngine:
    """
    Atomic batch lifecycle operations.

    Contract:
        Every public method takes ``(context, caller, ...)`` and either
        completes all of its store and history writes or raises before
        making any.  Never commits.

    Non-goals:
        - Does NOT administer roles or the pause flag (see
          ProvenanceLedgerService.set_paused / set_verifier).
        - Does NOT offer a harvesting transition; BatchStatus.HARVESTED is
          unreachable.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        batch_store: BatchStore | None = None,
        history_log: HistoryLog | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._store = batch_store or BatchStore(session)
        self._history = history_log or HistoryLog(session, self._clock)

    @property
    def batch_store(self) -> BatchStore:
        return self._store

    @property
    def history_log(self) -> HistoryLog:
        return self._history

    # ------------------------------------------------------------------
    # register
    # ------------------------------------------------------------------

    def register_batch(
        self,
        context: LedgerContext,
        caller: str,
        quantity: int,
        origin: str,
        harvest_date: int,
        certifications: Sequence[str] = (),
    ) -> int:
        """
        Register a new PENDING batch owned by the administrator.

        Preconditions:
            - not paused; caller is administrator; quantity > 0; origin
              non-empty and bounded; certifications well-formed.

        Postconditions:
            - New batch with the next id; history = [registered].

        Returns:
            The new batch id.
        """
        guard = IdentityGuard(context)
        guard.require_not_paused("register_batch")
        guard.require_administrator(caller, "register batches")
        validate_quantity(quantity)
        validate_origin(origin)
        validate_harvest_date(harvest_date)
        validate_certifications(certifications)

        batch_id = self._store.register(
            owner=caller,
            quantity=quantity,
            origin=origin,
            harvest_date=harvest_date,
            certifications=certifications,
        )
        self._history.append(
            batch_id,
            HistoryAction.REGISTERED,
            actor=caller,
            from_ref=None,
            to_ref=caller,
        )

        logger.info(
            "batch_registered",
            extra={"batch_id": batch_id, "quantity": quantity, "origin": origin},
        )
        return batch_id

    # ------------------------------------------------------------------
    # transfer
    # ------------------------------------------------------------------

    def transfer_ownership(
        self,
        context: LedgerContext,
        caller: str,
        batch_id: int,
        new_owner: str,
    ) -> bool:
        """
        Hand a batch to a new owner.

        Preconditions (checked in this order):
            - not paused; batch exists; new_owner is a valid recipient;
              caller owns the batch; status is not INVALID.
        """
        guard = IdentityGuard(context)
        guard.require_not_paused("transfer_ownership")
        batch = self._store.get(batch_id)
        guard.require_valid_recipient(new_owner)
        _require_owner(batch, caller)
        if batch.status == BatchStatus.INVALID:
            raise BatchStatusConflictError(batch_id, batch.status.value, "transfer")
        self._history.ensure_capacity(batch_id)

        self._store.set(batch_id, batch.evolve(owner=new_owner))
        self._history.append(
            batch_id,
            HistoryAction.TRANSFERRED,
            actor=caller,
            from_ref=caller,
            to_ref=new_owner,
        )

        logger.info(
            "batch_transferred",
            extra={"batch_id": batch_id, "from_owner": caller, "to_owner": new_owner},
        )
        return True

    # ------------------------------------------------------------------
    # split
    # ------------------------------------------------------------------

    def split_batch(
        self,
        context: LedgerContext,
        caller: str,
        batch_id: int,
        split_quantity: int,
    ) -> int:
        """
        Carve ``split_quantity`` off a batch into a new batch.

        Preconditions:
            - not paused; batch exists; caller owns it;
              0 < split_quantity < quantity.

        Postconditions:
            - original.quantity == before - split_quantity
            - new batch: owner = caller, quantity = split_quantity, origin,
              harvest_date, certifications and status copied verbatim.
            - original history += [split(from=original, to=new)]
            - new history == [created_from_split(from=original, to=caller)]

        Returns:
            The new batch id.
        """
        guard = IdentityGuard(context)
        guard.require_not_paused("split_batch")
        original = self._store.get(batch_id)
        _require_owner(original, caller)
        validate_split_quantity(split_quantity, original.quantity)
        self._history.ensure_capacity(batch_id)

        remaining = original.quantity - split_quantity
        assert remaining + split_quantity == original.quantity

        new_id = self._store.allocate_id()
        self._store.set(batch_id, original.evolve(quantity=remaining))
        self._store.create(
            original.evolve(
                batch_id=new_id,
                owner=caller,
                quantity=split_quantity,
            )
        )
        self._history.append(
            batch_id,
            HistoryAction.SPLIT,
            actor=caller,
            from_ref=str(batch_id),
            to_ref=str(new_id),
        )
        self._history.append(
            new_id,
            HistoryAction.CREATED_FROM_SPLIT,
            actor=caller,
            from_ref=str(batch_id),
            to_ref=caller,
        )

        logger.info(
            "batch_split",
            extra={
                "batch_id": batch_id,
                "new_batch_id": new_id,
                "split_quantity": split_quantity,
                "remaining_quantity": remaining,
            },
        )
        return new_id

    # ------------------------------------------------------------------
    # merge
    # ------------------------------------------------------------------

    def merge_batches(
        self,
        context: LedgerContext,
        caller: str,
        batch_id: int,
        other_batch_id: int,
    ) -> bool:
        """
        Absorb ``other_batch_id`` into ``batch_id``.

        Preconditions:
            - not paused; both batches exist; they are distinct; caller
              owns both; origin, harvest_date and status are equal; the
              merged quantity fits within MAX_QUANTITY.

        Postconditions:
            - batch.quantity == q1 + q2; other batch deleted permanently.
            - batch history += [merged(from=other, to=None)].
            - The absorbed batch's history is left intact.
        """
        guard = IdentityGuard(context)
        guard.require_not_paused("merge_batches")
        target = self._store.get(batch_id)
        absorbed = self._store.get(other_batch_id)
        if batch_id == other_batch_id:
            raise SelfMergeError(batch_id)
        _require_owner(target, caller)
        _require_owner(absorbed, caller)

        mismatched = [
            name
            for name in ("origin", "harvest_date", "status")
            if getattr(target, name) != getattr(absorbed, name)
        ]
        if mismatched:
            raise MergeMismatchError(batch_id, other_batch_id, mismatched)
        merged_quantity = validate_merged_quantity(target.quantity, absorbed.quantity)
        self._history.ensure_capacity(batch_id)

        self._store.delete(other_batch_id)
        self._store.set(batch_id, target.evolve(quantity=merged_quantity))
        self._history.append(
            batch_id,
            HistoryAction.MERGED,
            actor=caller,
            from_ref=str(other_batch_id),
            to_ref=None,
        )

        logger.info(
            "batches_merged",
            extra={
                "batch_id": batch_id,
                "absorbed_batch_id": other_batch_id,
                "merged_quantity": merged_quantity,
            },
        )
        return True

    # ------------------------------------------------------------------
    # verify
    # ------------------------------------------------------------------

    def verify_compliance(
        self,
        context: LedgerContext,
        caller: str,
        batch_id: int,
        new_status: BatchStatus | str,
        additional_certification: str | None = None,
    ) -> bool:
        """
        Set the compliance status of a batch.

        Preconditions (checked in this order):
            - not paused; caller is the verifier; new_status is VERIFIED or
              INVALID; batch exists; additional_certification (if given)
              is well-formed and fits within MAX_CERTIFICATIONS.

        Postconditions:
            - status == new_status; certification appended when given.
            - history += [verified(from=None, to=None, actor=caller)].
        """
        guard = IdentityGuard(context)
        guard.require_not_paused("verify_compliance")
        guard.require_verifier(caller)
        status = _coerce_status(new_status)
        if status not in VERIFIABLE_STATUSES:
            raise InvalidStatusTargetError(status.value)
        batch = self._store.get(batch_id)

        certifications = batch.certifications
        if additional_certification:
            validate_certification(additional_certification)
            if len(certifications) + 1 > MAX_CERTIFICATIONS:
                raise CertificationCapacityError(
                    len(certifications) + 1, MAX_CERTIFICATIONS, batch_id=batch_id
                )
            certifications = certifications + (additional_certification,)
        self._history.ensure_capacity(batch_id)

        self._store.set(
            batch_id,
            batch.evolve(status=status, certifications=certifications),
        )
        self._history.append(
            batch_id,
            HistoryAction.VERIFIED,
            actor=caller,
            from_ref=None,
            to_ref=None,
        )

        logger.info(
            "batch_verified",
            extra={
                "batch_id": batch_id,
                "previous_status": batch.status,
                "new_status": status,
                "certification_added": bool(additional_certification),
            },
        )
        return True
