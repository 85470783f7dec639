"""Selectors for the provenance kernel (read side)."""

from provenance_kernel.selectors.batch_selector import BatchSelector

__all__ = ["BatchSelector"]
