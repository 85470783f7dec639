"""
Provenance Kernel - batch lifecycle engine

An append-only provenance ledger for tracked physical goods with:
- Monotonic, never-reused batch identifiers
- Quantity-conserving split and merge
- Verifier-gated compliance status
- Immutable, hash-chained per-batch history
- Atomic operations (store mutation + history append commit together)
"""

__version__ = "0.1.0"
