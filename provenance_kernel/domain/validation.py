"""
Domain validation helpers -- pure checks on batch metadata and quantities.

Pure checks with no I/O.  Used by BatchStore and LifecycleEngine before any
mutation so that a refused operation leaves no trace.  Every refusal is a
ValidationError subclass; nothing here raises a bare TypeError.
"""

from __future__ import annotations

from collections.abc import Sequence

from provenance_kernel.exceptions import (
    CertificationCapacityError,
    InsufficientQuantityError,
    InvalidMetadataError,
    QuantityOverflowError,
)

MAX_ORIGIN_LENGTH = 256
MAX_CERTIFICATION_LENGTH = 64
MAX_CERTIFICATIONS = 10
MAX_HISTORY_ENTRIES = 50

# Largest value a BigInteger column holds
MAX_STORED_INT = 2**63 - 1
MAX_QUANTITY = MAX_STORED_INT


def is_int(value: object) -> bool:
    # bool is an int subclass but never a meaningful quantity
    return isinstance(value, int) and not isinstance(value, bool)


def is_storable_batch_id(batch_id: object) -> bool:
    """True if ``batch_id`` could name a stored batch."""
    return is_int(batch_id) and 0 < batch_id <= MAX_STORED_INT


def validate_quantity(quantity: int) -> None:
    """Quantity must be an integer in ``1..MAX_QUANTITY``."""
    if not is_int(quantity) or quantity <= 0:
        raise InsufficientQuantityError(quantity)
    if quantity > MAX_QUANTITY:
        raise QuantityOverflowError(quantity, MAX_QUANTITY)


def validate_merged_quantity(first: int, second: int) -> int:
    """Return ``first + second``, refusing a sum the store cannot hold."""
    total = first + second
    if total > MAX_QUANTITY:
        raise QuantityOverflowError(total, MAX_QUANTITY)
    return total


def validate_split_quantity(split_quantity: int, available: int) -> None:
    """Both halves of a split must stay strictly positive."""
    if (
        not is_int(split_quantity)
        or split_quantity <= 0
        or split_quantity >= available
    ):
        raise InsufficientQuantityError(split_quantity, available)


def validate_harvest_date(harvest_date: int) -> None:
    if not is_int(harvest_date):
        raise InvalidMetadataError("harvest_date", "must be an integer")
    if not 0 <= harvest_date <= MAX_STORED_INT:
        raise InvalidMetadataError(
            "harvest_date", f"must be between 0 and {MAX_STORED_INT}"
        )


def validate_origin(origin: str) -> None:
    if not isinstance(origin, str) or not origin:
        raise InvalidMetadataError("origin", "must be non-empty text")
    if len(origin) > MAX_ORIGIN_LENGTH:
        raise InvalidMetadataError(
            "origin", f"exceeds {MAX_ORIGIN_LENGTH} characters"
        )


def validate_certification(token: str) -> None:
    if not isinstance(token, str) or not token:
        raise InvalidMetadataError("certification", "must be non-empty text")
    if len(token) > MAX_CERTIFICATION_LENGTH:
        raise InvalidMetadataError(
            "certification", f"exceeds {MAX_CERTIFICATION_LENGTH} characters"
        )


def validate_certifications(
    certifications: Sequence[str],
    batch_id: int | None = None,
) -> None:
    """Every token well-formed and at most MAX_CERTIFICATIONS of them."""
    if isinstance(certifications, str) or not isinstance(certifications, Sequence):
        raise InvalidMetadataError("certifications", "must be a sequence of tokens")
    for token in certifications:
        validate_certification(token)
    if len(certifications) > MAX_CERTIFICATIONS:
        raise CertificationCapacityError(
            len(certifications), MAX_CERTIFICATIONS, batch_id=batch_id
        )
