"""
Configuration Loader (``provenance_config.loader``).

Responsibility
--------------
Loads a ledger YAML file and parses it into a frozen ``LedgerConfig``.
Runtime callers go through ``provenance_config.get_ledger_config()``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  document for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from provenance_config.schema import DEFAULT_NULL_PRINCIPAL, LedgerConfig
from provenance_kernel.utils.hashing import hash_payload

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string, got {value!r}")
    return value


def parse_ledger_config(data: dict[str, Any]) -> LedgerConfig:
    """Parse a LedgerConfig from a loaded YAML document."""
    roles = data["roles"]
    ledger = data.get("ledger") or {}
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(f"version must be an integer, got {version!r}")

    paused = ledger.get("paused", False)
    if not isinstance(paused, bool):
        raise ValueError(f"ledger.paused must be a boolean, got {paused!r}")

    log_level = str(logging_section.get("level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Unknown logging.level: {log_level!r}")

    return LedgerConfig(
        config_id=_require_text(data["config_id"], "config_id"),
        version=version,
        administrator=_require_text(roles["administrator"], "roles.administrator"),
        verifier=_require_text(roles["verifier"], "roles.verifier"),
        paused=paused,
        null_principal=_require_text(
            ledger.get("null_principal", DEFAULT_NULL_PRINCIPAL),
            "ledger.null_principal",
        ),
        database_url=_require_text(database.get("url", "sqlite://"), "database.url"),
        log_level=log_level,
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    return hash_payload(data)
