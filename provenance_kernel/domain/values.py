"""
Value types shared by the domain, the ORM models and the services.

BatchStatus and HistoryAction are stored as their string values; the ORM
models import them from here so the domain layer never depends on
SQLAlchemy.
"""

from enum import Enum


class BatchStatus(str, Enum):
    """Compliance status of a batch.

    Contract: Every batch starts PENDING.  Only compliance verification
    changes status, and only to VERIFIED or INVALID (repeatable, not a
    latch).  HARVESTED is a defined value that no operation reaches.
    """

    PENDING = "pending"
    VERIFIED = "verified"
    HARVESTED = "harvested"
    INVALID = "invalid"


# Statuses a verifier may assign
VERIFIABLE_STATUSES: frozenset[BatchStatus] = frozenset(
    {BatchStatus.VERIFIED, BatchStatus.INVALID}
)


class HistoryAction(str, Enum):
    """Lifecycle events recorded in a batch history.

    Contract: from_ref / to_ref meaning per action:
        REGISTERED          from: none             to: registering principal
        TRANSFERRED         from: previous owner   to: new owner
        SPLIT               from: original id      to: new id
        CREATED_FROM_SPLIT  from: original id      to: owner of new batch
        MERGED              from: absorbed id      to: none
        VERIFIED            from: none             to: none
    """

    REGISTERED = "registered"
    TRANSFERRED = "transferred"
    SPLIT = "split"
    CREATED_FROM_SPLIT = "created_from_split"
    MERGED = "merged"
    VERIFIED = "verified"
