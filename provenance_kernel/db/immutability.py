"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

A provenance trail is worthless if it can be rewritten. History entries
must never be edited or removed, and the provenance facts of a batch
(where and when it was harvested, which id it carries) must never change
after registration.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events and check the rules:

    session.flush()
         |
         v
    [before_update event] --> _check_*() --> ImmutabilityViolationError
         |                                             ^
         v                                             |
    [before_delete event] --> _check_*_delete() -------+
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, ImmutabilityViolationError propagates out of flush() and
the caller's transaction is rolled back.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity              | What is immutable                  | Why
--------------------|------------------------------------|---------------------------
BatchHistoryEntry   | Everything, always (no DELETE)     | The audit trail
Batch               | batch_id, origin, harvest_date     | Provenance facts

Batch rows themselves may be deleted: merge removes the absorbed batch.
Its history rows survive.

===============================================================================
USAGE
===============================================================================

    from provenance_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

To temporarily disable (TESTS ONLY - never in production):

    unregister_immutability_listeners()
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from provenance_kernel.exceptions import ImmutabilityViolationError
from provenance_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Fields fixed at registration
BATCH_PROVENANCE_FIELDS = frozenset({"batch_id", "origin", "harvest_date"})


def _check_history_entry_immutability(mapper, connection, target):
    """Prevent any updates to BatchHistoryEntry records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "BatchHistoryEntry",
            "entity_id": str(target.id),
            "batch_id": target.batch_id,
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="BatchHistoryEntry",
        entity_id=str(target.id),
        reason="History entries are immutable and cannot be modified",
    )


def _check_history_entry_delete(mapper, connection, target):
    """Prevent deletion of BatchHistoryEntry records."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "BatchHistoryEntry",
            "entity_id": str(target.id),
            "batch_id": target.batch_id,
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="BatchHistoryEntry",
        entity_id=str(target.id),
        reason="History entries cannot be deleted",
    )


def _check_batch_provenance_immutability(mapper, connection, target):
    """
    Prevent changes to provenance fields of a Batch.

    Owner, quantity, certifications and status are the mutable part of a
    batch; a change to any field in BATCH_PROVENANCE_FIELDS is blocked.
    """
    changed = sorted(
        name
        for name in BATCH_PROVENANCE_FIELDS
        if get_history(target, name).deleted
    )
    if not changed:
        return

    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Batch",
            "entity_id": str(target.id),
            "batch_id": target.batch_id,
            "operation": "UPDATE",
            "fields": changed,
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Batch",
        entity_id=str(target.batch_id),
        reason=f"Provenance fields cannot change after registration: {', '.join(changed)}",
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Idempotent.  Call this after models are importable but before any
    database operations begin.
    """
    from provenance_kernel.models.batch import Batch
    from provenance_kernel.models.batch_history import BatchHistoryEntry

    _safe_add_listener(BatchHistoryEntry, "before_update", _check_history_entry_immutability)
    _safe_add_listener(BatchHistoryEntry, "before_delete", _check_history_entry_delete)
    _safe_add_listener(Batch, "before_update", _check_batch_provenance_immutability)


def _safe_add_listener(target, event_name, listener_fn):
    if not event.contains(target, event_name, listener_fn):
        event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    """
    Safely remove an event listener, ignoring if not registered.
    """
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    from provenance_kernel.models.batch import Batch
    from provenance_kernel.models.batch_history import BatchHistoryEntry

    _safe_remove_listener(BatchHistoryEntry, "before_update", _check_history_entry_immutability)
    _safe_remove_listener(BatchHistoryEntry, "before_delete", _check_history_entry_delete)
    _safe_remove_listener(Batch, "before_update", _check_batch_provenance_immutability)
