"""
provenance_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_ledger_config()``.  No other component may read configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits above ``provenance_kernel``.  The kernel MUST
    NEVER import from ``provenance_config``; ``bridges`` translates a
    LedgerConfig into kernel inputs.

Resolution order:
    1. Explicit ``path`` argument
    2. ``PROVENANCE_CONFIG`` environment variable
    3. Packaged ``sets/default.yaml``
    ``DATABASE_URL`` in the environment overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``KeyError`` -- a required key is missing.
    - ``ValueError`` -- a value has the wrong type.

Audit relevance:
    Every successful ``get_ledger_config()`` call emits a
    ``PROVENANCE_CONFIG_TRACE`` log entry with the config id, version,
    checksum and role bindings, tying every operation back to the exact
    configuration that governed it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from provenance_config.loader import load_yaml_file, parse_ledger_config
from provenance_config.schema import LedgerConfig

_logger = logging.getLogger("provenance_kernel.config")

CONFIG_ENV_VAR = "PROVENANCE_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
_DEFAULT_CONFIG_FILE = _DEFAULT_CONFIG_DIR / "default.yaml"


def _resolve_path(path: Path | str | None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return _DEFAULT_CONFIG_FILE


def get_ledger_config(path: Path | str | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Explicit YAML file.  Defaults to ``$PROVENANCE_CONFIG`` or
            the packaged default set.

    Returns:
        A frozen LedgerConfig.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        KeyError: If a required key is missing.
        ValueError: If a value is malformed.
    """
    config_path = _resolve_path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Ledger configuration not found: {config_path}")

    config = parse_ledger_config(load_yaml_file(config_path))

    database_url = os.environ.get(DATABASE_URL_ENV_VAR)
    if database_url:
        config = replace(config, database_url=database_url)

    _logger.info(
        "PROVENANCE_CONFIG_TRACE",
        extra={
            "trace_type": "PROVENANCE_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "config_path": str(config_path),
            "administrator": config.administrator,
            "verifier": config.verifier,
            "paused": config.paused,
        },
    )

    return config


__all__ = ["LedgerConfig", "get_ledger_config"]
