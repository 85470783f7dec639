"""
Typed Exception Hierarchy for the Provenance Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A provenance ledger is only useful if every refusal is precise. Callers
(transport adapters, auditors, tests) must be able to tell "you are not the
owner" from "the batch does not exist" without parsing message text.

Every exception in this module:
  1. Has a TYPED class (catch by type, not message)
  2. Has a string CODE class attribute (machine-readable, API-safe)
  3. Has a NUMERIC_CODE class attribute matching the on-chain error
     constants of the timber tracking contract
  4. Carries structured DATA as attributes

Example:
    try:
        engine.split_batch(context, caller, batch_id, 40)
    except NotOwnerError as e:
        respond(code=e.code, batch_id=e.batch_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProvenanceKernelError (base)
    |
    +-- AuthorizationError
    |   +-- NotAuthorizedError
    |   +-- VerifierOnlyError
    |   +-- NotOwnerError
    |
    +-- ValidationError
    |   +-- InsufficientQuantityError
    |   +-- QuantityOverflowError
    |   +-- InvalidMetadataError
    |   +-- InvalidStatusTargetError
    |   +-- InvalidRecipientError
    |
    +-- NotFoundError
    |   +-- BatchNotFoundError
    |
    +-- StateConflictError
    |   +-- BatchAlreadyExistsError
    |   +-- BatchStatusConflictError
    |   +-- MergeMismatchError
    |   +-- SelfMergeError
    |
    +-- SuspendedError
    |   +-- OperationsPausedError
    |
    +-- CapacityError
    |   +-- CertificationCapacityError
    |   +-- HistoryCapacityError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- AuditError
        +-- HistoryChainBrokenError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                             | Numeric | When Raised
---------------------------------|---------|----------------------------------
NOT_AUTHORIZED                   | 100     | Caller is not the administrator
INVALID_BATCH_ID                 | 101     | Batch id is unknown or was merged away
INSUFFICIENT_QUANTITY            | 102     | Quantity not a positive int, or split out of range
BATCH_ALREADY_EXISTS             | 103     | Allocated id already occupied
PAUSED                           | 104     | Operations globally suspended
ZERO_ADDRESS                     | 105     | Recipient is the null principal
INVALID_METADATA                 | 106     | Origin / harvest date / certification malformed
NOT_OWNER                        | 107     | Caller does not own the batch
MERGE_MISMATCH                   | 108     | Origin/date/status differ
ORACLE_ONLY                      | 109     | Caller is not the verifier
INVALID_STATUS                   | 110     | Bad verify target / transfer of INVALID
CERTIFICATION_CAPACITY_EXCEEDED  | 111     | More than 10 certifications
HISTORY_CAPACITY_EXCEEDED        | 111     | More than 50 history entries
SELF_MERGE                       | 112     | Merging a batch with itself
QUANTITY_OVERFLOW                | -       | Quantity or merged sum exceeds MAX_QUANTITY
IMMUTABILITY_VIOLATION           | -       | Edit/delete of a history entry
HISTORY_CHAIN_BROKEN             | -       | Hash chain validation failed

===============================================================================
"""


class ProvenanceKernelError(Exception):
    """
    Base exception for all provenance kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROVENANCE_KERNEL_ERROR"
    numeric_code: int | None = None


# Authorization


class AuthorizationError(ProvenanceKernelError):
    """Caller lacks the role or ownership the operation requires."""

    code: str = "AUTHORIZATION_ERROR"


class NotAuthorizedError(AuthorizationError):
    """Caller is not the administrator."""

    code: str = "NOT_AUTHORIZED"
    numeric_code = 100

    def __init__(self, caller: str, action: str):
        self.caller = caller
        self.action = action
        super().__init__(f"{caller} is not authorized to {action}")


class VerifierOnlyError(AuthorizationError):
    """Only the verifier may change compliance status."""

    code: str = "ORACLE_ONLY"
    numeric_code = 109

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(f"{caller} is not the compliance verifier")


class NotOwnerError(AuthorizationError):
    """Caller does not own the batch."""

    code: str = "NOT_OWNER"
    numeric_code = 107

    def __init__(self, batch_id: int, caller: str, owner: str):
        self.batch_id = batch_id
        self.caller = caller
        self.owner = owner
        super().__init__(f"{caller} does not own batch {batch_id}")


# Validation


class ValidationError(ProvenanceKernelError):
    """Malformed quantity, metadata, recipient or status target."""

    code: str = "VALIDATION_ERROR"


class InsufficientQuantityError(ValidationError):
    """Quantity is not positive, or a split does not leave both halves positive."""

    code: str = "INSUFFICIENT_QUANTITY"
    numeric_code = 102

    def __init__(self, quantity: int, available: int | None = None):
        self.quantity = quantity
        self.available = available
        if available is None:
            message = f"Quantity must be a positive integer, got {quantity!r}"
        else:
            message = (
                f"Split quantity {quantity} must be greater than 0 "
                f"and less than {available}"
            )
        super().__init__(message)


class QuantityOverflowError(ValidationError):
    """Quantity, or the sum produced by a merge, exceeds the storable maximum."""

    code: str = "QUANTITY_OVERFLOW"

    def __init__(self, quantity: int, limit: int):
        self.quantity = quantity
        self.limit = limit
        super().__init__(f"Quantity {quantity} exceeds the maximum of {limit}")


class InvalidMetadataError(ValidationError):
    """Origin, harvest date or certification is malformed or exceeds its bound."""

    code: str = "INVALID_METADATA"
    numeric_code = 106

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class InvalidStatusTargetError(ValidationError):
    """Requested status is not reachable through compliance verification."""

    code: str = "INVALID_STATUS"
    numeric_code = 110

    def __init__(self, status: str):
        self.status = status
        super().__init__(
            f"Status {status!r} cannot be set by verification "
            f"(allowed: verified, invalid)"
        )


class InvalidRecipientError(ValidationError):
    """Recipient is the reserved null principal, blank, or not a principal string."""

    code: str = "ZERO_ADDRESS"
    numeric_code = 105

    def __init__(self, recipient: str):
        self.recipient = recipient
        super().__init__(f"Invalid recipient: {recipient!r}")


# Not found


class NotFoundError(ProvenanceKernelError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"


class BatchNotFoundError(NotFoundError):
    """Batch id was never allocated or has been merged away."""

    code: str = "INVALID_BATCH_ID"
    numeric_code = 101

    def __init__(self, batch_id: int):
        self.batch_id = batch_id
        super().__init__(f"Batch not found: {batch_id}")


# State conflicts


class StateConflictError(ProvenanceKernelError):
    """Operation is well-formed but conflicts with current batch state."""

    code: str = "STATE_CONFLICT"


class BatchAlreadyExistsError(StateConflictError):
    """
    Allocated identifier is already occupied.

    Unreachable under correct sequence allocation; raised rather than
    overwriting an existing record.
    """

    code: str = "BATCH_ALREADY_EXISTS"
    numeric_code = 103

    def __init__(self, batch_id: int):
        self.batch_id = batch_id
        super().__init__(f"Batch already exists: {batch_id}")


class BatchStatusConflictError(StateConflictError):
    """Batch status forbids the operation (transfer of an INVALID batch)."""

    code: str = "INVALID_STATUS"
    numeric_code = 110

    def __init__(self, batch_id: int, status: str, operation: str):
        self.batch_id = batch_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} batch {batch_id} with status {status}"
        )


class MergeMismatchError(StateConflictError):
    """Batches differ in origin, harvest date or status."""

    code: str = "MERGE_MISMATCH"
    numeric_code = 108

    def __init__(self, batch_id: int, other_batch_id: int, fields: list[str]):
        self.batch_id = batch_id
        self.other_batch_id = other_batch_id
        self.fields = fields
        super().__init__(
            f"Cannot merge batch {other_batch_id} into {batch_id}: "
            f"mismatched {', '.join(fields)}"
        )


class SelfMergeError(StateConflictError):
    """A batch cannot be merged into itself."""

    code: str = "SELF_MERGE"
    numeric_code = 112

    def __init__(self, batch_id: int):
        self.batch_id = batch_id
        super().__init__(f"Cannot merge batch {batch_id} with itself")


# Suspension


class SuspendedError(ProvenanceKernelError):
    """Operations are globally suspended."""

    code: str = "SUSPENDED"


class OperationsPausedError(SuspendedError):
    """The pause flag is set."""

    code: str = "PAUSED"
    numeric_code = 104

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operations are paused: {operation} rejected")


# Capacity


class CapacityError(ProvenanceKernelError):
    """A bounded sequence is full."""

    code: str = "CAPACITY_EXCEEDED"
    numeric_code = 111


class CertificationCapacityError(CapacityError):
    """A batch may carry at most MAX_CERTIFICATIONS certifications."""

    code: str = "CERTIFICATION_CAPACITY_EXCEEDED"

    def __init__(self, count: int, limit: int, batch_id: int | None = None):
        self.batch_id = batch_id
        self.count = count
        self.limit = limit
        super().__init__(
            f"Certification capacity exceeded: {count} > {limit}"
        )


class HistoryCapacityError(CapacityError):
    """A batch history may hold at most MAX_HISTORY_ENTRIES entries."""

    code: str = "HISTORY_CAPACITY_EXCEEDED"

    def __init__(self, batch_id: int, limit: int):
        self.batch_id = batch_id
        self.limit = limit
        super().__init__(
            f"History for batch {batch_id} is full ({limit} entries)"
        )


# Immutability


class ImmutabilityError(ProvenanceKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    History entries are immutable from creation; batch provenance fields
    are immutable after registration.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Audit


class AuditError(ProvenanceKernelError):
    """Base exception for audit trail errors."""

    code: str = "AUDIT_ERROR"


class HistoryChainBrokenError(AuditError):
    """History hash chain validation failed."""

    code: str = "HISTORY_CHAIN_BROKEN"

    def __init__(
        self,
        batch_id: int,
        position: int,
        expected_hash: str,
        actual_hash: str,
    ):
        self.batch_id = batch_id
        self.position = position
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"History chain broken for batch {batch_id} at entry {position}: "
            f"expected {expected_hash}, found {actual_hash}"
        )
