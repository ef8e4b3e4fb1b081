"""
YAML loading and parsing for ``LedgerSettings``.

Responsibility:
    Reads YAML files, deep-merges overrides onto the defaults, applies
    environment overrides and validates the result into frozen dataclasses.

Failure modes:
    - ``FileNotFoundError`` -- an override file does not exist.
    - ``yaml.YAMLError`` -- invalid YAML.
    - ``ValueError`` -- a value fails validation; the message names the key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from ledger_config.schema import (
    DatabaseSettings,
    LedgerSettings,
    PaginationSettings,
    VoucherSettings,
)

_VALID_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())
_VOUCHER_TYPES = ("INCOME", "EXPENSE", "TRANSFER")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` without mutating either."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """DATABASE_URL and LEDGER_LOG_LEVEL win over any file."""
    overrides: dict[str, Any] = {}
    if environ.get("DATABASE_URL"):
        overrides["database"] = {"url": environ["DATABASE_URL"]}
    if environ.get("LEDGER_LOG_LEVEL"):
        overrides["log_level"] = environ["LEDGER_LOG_LEVEL"]
    return deep_merge(raw, overrides)


def _positive_int(section: str, key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{section}.{key} must be a positive integer, got {value!r}")
    return value


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be a mapping")
    return value


def parse_settings(raw: Mapping[str, Any]) -> LedgerSettings:
    """
    Validate a merged configuration dict into ``LedgerSettings``.

    Raises:
        ValueError: on the first invalid value.
    """
    db = _section(raw, "database")
    url = db.get("url")
    if not url or not isinstance(url, str):
        raise ValueError("database.url is required")
    database = DatabaseSettings(
        url=url,
        echo=bool(db.get("echo", False)),
        pool_size=_positive_int("database", "pool_size", db.get("pool_size", 20)),
        max_overflow=int(db.get("max_overflow", 10)),
        pool_timeout=_positive_int("database", "pool_timeout", db.get("pool_timeout", 30)),
        pool_recycle=int(db.get("pool_recycle", 1800)),
    )

    v = _section(raw, "vouchers")
    prefixes = {str(k).upper(): str(p) for k, p in (v.get("prefixes") or {}).items()}
    missing = [t for t in _VOUCHER_TYPES if not prefixes.get(t)]
    if missing:
        raise ValueError(f"vouchers.prefixes missing entries for {missing}")
    unknown = sorted(set(prefixes) - set(_VOUCHER_TYPES))
    if unknown:
        raise ValueError(f"vouchers.prefixes has unknown voucher types {unknown}")
    if len(set(prefixes.values())) != len(prefixes):
        raise ValueError("vouchers.prefixes must be distinct")
    vouchers = VoucherSettings(
        prefixes=prefixes,
        sequence_width=_positive_int("vouchers", "sequence_width", v.get("sequence_width", 4)),
    )

    p = _section(raw, "pagination")
    pagination = PaginationSettings(
        default_page_size=_positive_int(
            "pagination", "default_page_size", p.get("default_page_size", 20)
        ),
        max_page_size=_positive_int("pagination", "max_page_size", p.get("max_page_size", 100)),
    )
    if pagination.default_page_size > pagination.max_page_size:
        raise ValueError("pagination.default_page_size exceeds max_page_size")

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in _VALID_LOG_LEVELS:
        raise ValueError(f"log_level {log_level!r} is not a logging level")

    currency = str(raw.get("currency", "PKR")).upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"currency must be a 3-letter code, got {currency!r}")

    return LedgerSettings(
        database=database,
        vouchers=vouchers,
        pagination=pagination,
        log_level=log_level,
        currency=currency,
    )
