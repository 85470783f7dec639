"""
LedgerContext -- explicit role and pause state for lifecycle operations.

Responsibility:
    Carries the externally administered state every lifecycle operation
    consults: who the administrator is, who the compliance verifier is,
    whether operations are suspended, and which principal is the reserved
    null identity.

Architecture position:
    Kernel > Domain -- pure value object.  Built by the outer service (or
    by provenance_config.bridges) and passed explicitly to every
    LifecycleEngine call.  There is no module-level role state.

Invariants enforced:
    - The context is frozen; role rotation and pausing produce a new
      context via ``with_verifier`` / ``with_paused``.
"""

from dataclasses import dataclass, replace

# Reserved "zero address" principal that may never own a batch
NULL_PRINCIPAL = "SP000000000000000000002Q6VF78"


@dataclass(frozen=True)
class LedgerContext:
    """Role registers and pause flag supplied by the host."""

    administrator: str
    verifier: str
    paused: bool = False
    null_principal: str = NULL_PRINCIPAL

    def with_paused(self, paused: bool) -> "LedgerContext":
        return replace(self, paused=paused)

    def with_verifier(self, verifier: str) -> "LedgerContext":
        return replace(self, verifier=verifier)
