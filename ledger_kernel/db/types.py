"""
Module: ledger_kernel.db.types
Responsibility: Money constants and helpers shared by every service and
    selector.
Architecture position: Kernel > DB.  MUST NOT import from models/,
    services/ or selectors/.

Invariants enforced:
    - No floats anywhere in the kernel.  Monetary amounts are Decimal with
      MONEY_DECIMAL_PLACES digits after the point.
    - round_money() is the only rounding function applied to stored or
      aggregated amounts.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP
ZERO = Decimal("0")


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given number of decimal places.

    Args:
        value: The Decimal value to round.
        decimal_places: Number of decimal places to round to.
        rounding: Rounding mode (default: ROUND_HALF_UP).

    Returns:
        Rounded Decimal value.
    """
    quantize_str = "0." + "0" * decimal_places
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def to_money(value: Any) -> Decimal:
    """
    Coerce a stored or aggregated value to a rounded Decimal.

    Aggregates come back as int, float or Decimal depending on the
    dialect; None (SUM over no rows) becomes zero.

    Raises:
        ValueError: If value is not numeric.
    """
    if value is None:
        return round_money(ZERO)
    if isinstance(value, Decimal):
        return round_money(value)
    try:
        return round_money(Decimal(str(value)))
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc
