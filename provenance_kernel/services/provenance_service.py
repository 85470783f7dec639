"""
ProvenanceLedgerService -- canonical entry point for all ledger operations.

Responsibility:
    Holds the current LedgerContext (administrator, verifier, pause flag),
    drives LifecycleEngine operations inside a correlation-scoped log
    context, owns the transaction boundary, and converts kernel refusals
    into explicit OperationResult values.

Architecture position:
    Kernel > Services -- imperative shell, owns transaction boundaries.
    Transport adapters (CLI, RPC, tests) call this service only.

Operation flow:
    op(caller, ...)
      1. Bind LogContext (correlation_id, caller, batch_id, operation)
      2. LifecycleEngine.<op>(context, caller, ...)
      3. Commit on success, rollback on any failure
      4. Return OperationResult.ok(value) / OperationResult.fail(error)

Invariants enforced:
    - Atomicity: a refused operation is rolled back before the result is
      returned, so no partially applied mutation ever commits.

Failure modes:
    - Kernel refusals (ProvenanceKernelError) become failed results.
    - Any other exception is logged, rolled back and re-raised.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from provenance_kernel.domain.clock import Clock, SystemClock
from provenance_kernel.domain.context import LedgerContext
from provenance_kernel.domain.dtos import BatchRecord, HistoryEntryRecord
from provenance_kernel.domain.identity_guard import IdentityGuard
from provenance_kernel.exceptions import ProvenanceKernelError
from provenance_kernel.logging_config import LogContext, get_logger
from provenance_kernel.domain.values import BatchStatus
from provenance_kernel.selectors.batch_selector import BatchSelector
from provenance_kernel.services.lifecycle_engine import LifecycleEngine

logger = get_logger("services.provenance")

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of one ledger operation: a value or a kernel error."""

    value: T | None = None
    error: ProvenanceKernelError | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def code(self) -> str | None:
        return self.error.code if self.error is not None else None

    @property
    def numeric_code(self) -> int | None:
        return self.error.numeric_code if self.error is not None else None

    @classmethod
    def ok(cls, value: T) -> OperationResult[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, error: ProvenanceKernelError) -> OperationResult[T]:
        return cls(error=error)


class ProvenanceLedgerService:
    """
    Transactional façade over LifecycleEngine.

    Contract:
        Every mutating method returns an OperationResult; kernel errors
        never escape.  Read methods return DTOs directly.

    Guarantees:
        - Commit on success, rollback on failure (when auto_commit=True).
        - The held LedgerContext is replaced, never mutated, by
          set_paused / set_verifier.
    """

    def __init__(
        self,
        session: Session,
        context: LedgerContext,
        clock: Clock | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._context = context
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit
        self._engine = LifecycleEngine(session, self._clock)
        self._selector = BatchSelector(session)

    @property
    def context(self) -> LedgerContext:
        return self._context

    @property
    def engine(self) -> LifecycleEngine:
        return self._engine

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    def _run(
        self,
        operation: str,
        caller: str,
        batch_id: int | None,
        action: Callable[[], T],
        **details: Any,
    ) -> OperationResult[T]:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            caller=caller,
            batch_id=str(batch_id) if batch_id is not None else None,
            operation=operation,
        ):
            logger.info(f"{operation}_started", extra=details)
            t0 = time.monotonic()

            try:
                value = action()
                if self._auto_commit:
                    self._session.commit()
            except ProvenanceKernelError as exc:
                if self._auto_commit:
                    self._session.rollback()
                logger.warning(
                    "lifecycle_operation_rejected",
                    extra={
                        "error_code": exc.code,
                        "numeric_code": exc.numeric_code,
                        "reason": str(exc),
                    },
                )
                return OperationResult.fail(exc)
            except Exception:
                if self._auto_commit:
                    self._session.rollback()
                logger.error(
                    "lifecycle_operation_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise

            logger.info(
                f"{operation}_completed",
                extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
            )
            return OperationResult.ok(value)

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def register_batch(
        self,
        caller: str,
        quantity: int,
        origin: str,
        harvest_date: int,
        certifications: tuple[str, ...] | list[str] = (),
    ) -> OperationResult[int]:
        return self._run(
            "register_batch",
            caller,
            None,
            lambda: self._engine.register_batch(
                self._context, caller, quantity, origin, harvest_date, certifications
            ),
            quantity=quantity,
            origin=origin,
        )

    def transfer_ownership(
        self, caller: str, batch_id: int, new_owner: str
    ) -> OperationResult[bool]:
        return self._run(
            "transfer_ownership",
            caller,
            batch_id,
            lambda: self._engine.transfer_ownership(
                self._context, caller, batch_id, new_owner
            ),
            new_owner=new_owner,
        )

    def split_batch(
        self, caller: str, batch_id: int, split_quantity: int
    ) -> OperationResult[int]:
        return self._run(
            "split_batch",
            caller,
            batch_id,
            lambda: self._engine.split_batch(
                self._context, caller, batch_id, split_quantity
            ),
            split_quantity=split_quantity,
        )

    def merge_batches(
        self, caller: str, batch_id: int, other_batch_id: int
    ) -> OperationResult[bool]:
        return self._run(
            "merge_batches",
            caller,
            batch_id,
            lambda: self._engine.merge_batches(
                self._context, caller, batch_id, other_batch_id
            ),
            other_batch_id=other_batch_id,
        )

    def verify_compliance(
        self,
        caller: str,
        batch_id: int,
        new_status: BatchStatus | str,
        additional_certification: str | None = None,
    ) -> OperationResult[bool]:
        return self._run(
            "verify_compliance",
            caller,
            batch_id,
            lambda: self._engine.verify_compliance(
                self._context, caller, batch_id, new_status, additional_certification
            ),
            new_status=new_status,
        )

    # ------------------------------------------------------------------
    # Role and pause administration
    # ------------------------------------------------------------------

    def set_paused(self, caller: str, paused: bool) -> OperationResult[bool]:
        """Suspend or resume all lifecycle operations (administrator only)."""

        def apply() -> bool:
            IdentityGuard(self._context).require_administrator(caller, "set paused")
            self._context = self._context.with_paused(paused)
            return True

        return self._run("set_paused", caller, None, apply, paused=paused)

    def set_verifier(self, caller: str, new_verifier: str) -> OperationResult[bool]:
        """Rotate the verifier role (administrator only)."""

        def apply() -> bool:
            guard = IdentityGuard(self._context)
            guard.require_administrator(caller, "set verifier")
            guard.require_valid_recipient(new_verifier)
            self._context = self._context.with_verifier(new_verifier)
            return True

        return self._run(
            "set_verifier", caller, None, apply, new_verifier=new_verifier
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_batch_details(self, batch_id: int) -> BatchRecord | None:
        return self._selector.get_batch_details(batch_id)

    def get_batch_history(self, batch_id: int) -> tuple[HistoryEntryRecord, ...]:
        return self._selector.get_batch_history(batch_id)

    def get_next_batch_id(self) -> int:
        return self._selector.get_next_batch_id()

    def verify_history_chain(self, batch_id: int) -> OperationResult[bool]:
        """Recompute the hash chain of a batch's history."""
        try:
            return OperationResult.ok(self._engine.history_log.verify_chain(batch_id))
        except ProvenanceKernelError as exc:
            return OperationResult.fail(exc)
