"""
ledger_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_settings()`` is the only way to obtain configuration.  It loads
    the packaged ``defaults.yaml``, merges an optional override file, then
    applies environment overrides, and returns a frozen ``LedgerSettings``.

Architecture position:
    Sits above ``ledger_kernel`` and below ``ledger_api``.  The kernel
    never imports from this package; the API passes settings values into
    kernel constructors.

Sources, lowest precedence first:
    1. ``ledger_config/defaults.yaml``
    2. The file named by ``config_file`` or ``LEDGER_CONFIG_FILE``
    3. ``DATABASE_URL`` and ``LEDGER_LOG_LEVEL``
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from ledger_config.loader import (
    apply_env_overrides,
    deep_merge,
    load_yaml_file,
    parse_settings,
)
from ledger_config.schema import (
    DatabaseSettings,
    LedgerSettings,
    PaginationSettings,
    VoucherSettings,
)

_logger = logging.getLogger("ledger_kernel.config")

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"


def get_settings(
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> LedgerSettings:
    """
    Build the active settings.

    Args:
        config_file: Optional override file; defaults to LEDGER_CONFIG_FILE.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        FileNotFoundError: The override file does not exist.
        ValueError: A configuration value is invalid.
    """
    env = os.environ if environ is None else environ
    raw = load_yaml_file(DEFAULTS_FILE)

    override = config_file or env.get("LEDGER_CONFIG_FILE")
    if override:
        raw = deep_merge(raw, load_yaml_file(Path(override)))

    settings = parse_settings(apply_env_overrides(raw, env))
    _logger.info(
        "ledger_config_loaded",
        extra={
            "override_file": str(override) if override else None,
            "log_level": settings.log_level,
            "currency": settings.currency,
        },
    )
    return settings


__all__ = [
    "DatabaseSettings",
    "LedgerSettings",
    "PaginationSettings",
    "VoucherSettings",
    "get_settings",
]
