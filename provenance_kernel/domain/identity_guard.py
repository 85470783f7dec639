"""
IdentityGuard -- role and recipient predicates.

Responsibility:
    Answers "is this caller the administrator / the verifier?" and "may
    this principal receive a batch?" against a LedgerContext, and offers
    ``require_*`` variants that raise the matching typed error.

Architecture position:
    Kernel > Domain -- pure functional core.  Consulted, never mutated, by
    LifecycleEngine and ProvenanceLedgerService.

Failure modes:
    - NotAuthorizedError, VerifierOnlyError, InvalidRecipientError,
      OperationsPausedError from the ``require_*`` methods.
"""

from provenance_kernel.domain.context import LedgerContext
from provenance_kernel.exceptions import (
    InvalidRecipientError,
    NotAuthorizedError,
    OperationsPausedError,
    VerifierOnlyError,
)


class IdentityGuard:
    """Stateless predicate checks against a LedgerContext."""

    def __init__(self, context: LedgerContext):
        self._context = context

    @property
    def context(self) -> LedgerContext:
        return self._context

    def is_administrator(self, caller: str) -> bool:
        return caller == self._context.administrator

    def is_verifier(self, caller: str) -> bool:
        return caller == self._context.verifier

    def is_valid_recipient(self, identity: str) -> bool:
        """Reject non-text, blank identities and the reserved null principal."""
        if not isinstance(identity, str) or not identity.strip():
            return False
        return identity != self._context.null_principal

    def require_not_paused(self, operation: str) -> None:
        if self._context.paused:
            raise OperationsPausedError(operation)

    def require_administrator(self, caller: str, action: str) -> None:
        if not self.is_administrator(caller):
            raise NotAuthorizedError(caller, action)

    def require_verifier(self, caller: str) -> None:
        if not self.is_verifier(caller):
            raise VerifierOnlyError(caller)

    def require_valid_recipient(self, identity: str) -> None:
        if not self.is_valid_recipient(identity):
            raise InvalidRecipientError(identity)
