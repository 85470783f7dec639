"""
Config -> Kernel Bridges.

Functions that convert a LedgerConfig into kernel inputs.  These live in
provenance_config (the producer) because the kernel must NEVER import
provenance_config.

Usage:
    from provenance_config import get_ledger_config
    from provenance_config.bridges import build_ledger_context, build_engine

    config = get_ledger_config()
    context = build_ledger_context(config)
    build_engine(config)
"""

from __future__ import annotations

import logging

from provenance_config.schema import LedgerConfig
from provenance_kernel.db.engine import init_engine_from_url
from provenance_kernel.domain.context import LedgerContext
from provenance_kernel.logging_config import configure_logging


def build_ledger_context(config: LedgerConfig) -> LedgerContext:
    """Translate role bindings and the pause flag into a LedgerContext."""
    return LedgerContext(
        administrator=config.administrator,
        verifier=config.verifier,
        paused=config.paused,
        null_principal=config.null_principal,
    )


def build_engine(config: LedgerConfig, echo: bool = False):
    """Initialize the kernel database engine from ``config.database_url``."""
    return init_engine_from_url(config.database_url, echo=echo)


def apply_logging(config: LedgerConfig) -> None:
    """Configure kernel logging at the configured level (idempotent)."""
    configure_logging(level=getattr(logging, config.log_level))
