"""
Settings schema (``ledger_config.schema``).

Frozen dataclasses describing runtime configuration.  Instances are built
only by ``ledger_config.loader`` and handed out by ``get_settings()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class VoucherSettings:
    # voucher type -> number prefix, e.g. INCOME -> INC
    prefixes: dict[str, str] = field(default_factory=dict)
    sequence_width: int = 4


@dataclass(frozen=True)
class PaginationSettings:
    default_page_size: int = 20
    max_page_size: int = 100


@dataclass(frozen=True)
class LedgerSettings:
    """Complete runtime configuration."""

    database: DatabaseSettings
    vouchers: VoucherSettings = field(default_factory=VoucherSettings)
    pagination: PaginationSettings = field(default_factory=PaginationSettings)
    log_level: str = "INFO"
    currency: str = "PKR"
