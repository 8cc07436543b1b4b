"""
Numeric coercion and money rounding helpers.

Order records arrive from forms and JSON files, so numeric fields may be
missing, strings, or non-finite. These helpers neutralize such values instead
of rejecting them.
"""
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Optional

CENT = Decimal('0.01')
ZERO = Decimal('0')


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a value to a finite float, falling back to `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but keeps "not provided" distinct from zero."""
    if value is None or value == '':
        return None
    number = to_number(value, default=math.nan)
    return None if math.isnan(number) else number


def to_decimal(value: Any, default: float = 0.0) -> Decimal:
    """
    Convert to Decimal through the shortest float repr.

    12.3 becomes Decimal('12.3') rather than the binary expansion, so the
    arithmetic behaves like decimal-string math.
    """
    return Decimal(repr(to_number(value, default)))


def round_money(value: Decimal) -> float:
    """Round half away from zero to two places and return a float."""
    with localcontext() as ctx:
        # quantize needs every integer digit plus two decimals within precision
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return float(value.quantize(CENT, rounding=ROUND_HALF_UP))
