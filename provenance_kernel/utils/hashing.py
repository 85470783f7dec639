"""
Deterministic hashing utilities.

All hashing in the provenance kernel must be deterministic and reproducible.
This module provides the canonical hashing functions used throughout.
"""

import hashlib
import json
from enum import Enum
from typing import Any


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (tuple, frozenset)):
        return list(obj)
    if isinstance(obj, bytes):
        return obj.hex()

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Keys are sorted alphabetically and no whitespace is emitted.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_history_entry(
    batch_id: int,
    position: int,
    timestamp: int,
    action: str,
    from_ref: str | None,
    to_ref: str | None,
    actor: str,
    prev_hash: str | None,
) -> str:
    """
    Compute the chained hash of a history entry.

    The hash covers every recorded field plus the previous entry's hash,
    creating a per-batch tamper-evident chain.

    Returns:
        Hex-encoded SHA-256 hash.
    """
    components = [
        str(batch_id),
        str(position),
        str(timestamp),
        action,
        from_ref if from_ref is not None else "NONE",
        to_ref if to_ref is not None else "NONE",
        actor,
        prev_hash or "GENESIS",
    ]
    data = "|".join(components)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
