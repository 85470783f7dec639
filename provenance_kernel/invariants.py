"""
Kernel Invariants Contract.

These invariants are structural law. They hold after every lifecycle
operation and no configuration, role assignment or pause state may
override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across LifecycleEngine, BatchStore, HistoryLog,
SequenceService, the ORM immutability listeners and DB check constraints.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    POSITIVE_QUANTITY = "positive_quantity"
    """Every stored batch has quantity > 0. Enforced by BatchStore
    validation, LifecycleEngine split bounds, and a DB check constraint."""

    IDENTIFIER_NEVER_REUSED = "identifier_never_reused"
    """Batch ids are allocated from a monotonic counter row and are never
    handed out twice, even after a merge deletes the batch. Enforced by
    SequenceService."""

    SPLIT_CONSERVATION = "split_conservation"
    """Pre-split quantity equals remaining plus split-off quantity.
    Enforced by LifecycleEngine.split_batch."""

    MERGE_CONSERVATION = "merge_conservation"
    """Merged quantity equals the sum of both inputs and the absorbed
    batch is removed. Enforced by LifecycleEngine.merge_batches."""

    HISTORY_APPEND_ONLY = "history_append_only"
    """History entries are never edited or removed and keep insertion
    order. Enforced by HistoryLog positions and ORM listeners
    (provenance_kernel.db.immutability)."""

    PROVENANCE_IMMUTABLE = "provenance_immutable"
    """Origin and harvest date never change after registration. Enforced
    by ORM listeners."""

    ATOMICITY = "atomicity"
    """Store mutations and history appends of one operation commit
    together or not at all. Enforced by front-loaded validation in
    LifecycleEngine and the transaction boundary in
    ProvenanceLedgerService."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "provenance_config",
)
