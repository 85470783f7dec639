"""
LedgerConfig schema.

The parsed, frozen form of a ledger configuration file.  YAML documents
are parsed into this type by the loader and translated into a kernel
LedgerContext by ``provenance_config.bridges``.
"""

from __future__ import annotations

from dataclasses import dataclass

# Kept in sync with provenance_kernel.domain.context.NULL_PRINCIPAL
DEFAULT_NULL_PRINCIPAL = "SP000000000000000000002Q6VF78"


@dataclass(frozen=True)
class LedgerConfig:
    """Role bindings, pause flag and storage settings for one deployment."""

    config_id: str
    version: int
    administrator: str
    verifier: str
    paused: bool = False
    null_principal: str = DEFAULT_NULL_PRINCIPAL
    database_url: str = "sqlite://"
    log_level: str = "INFO"
    checksum: str = ""
