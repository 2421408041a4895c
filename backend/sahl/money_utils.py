from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

# Money and quantities are stored as NUMERIC(12, 2).
SCALE = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """
    Convert an int / str / Decimal to a Decimal rounded to two places (half-up).

    Floats go through str() so 0.1 stays 0.10 rather than its binary expansion.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, float):
        value = str(value)
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, TypeError):
        raise ValueError(f"not a number: {value!r}")
    if not d.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    try:
        return d.quantize(SCALE, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"number out of range: {value!r}")


def to_str(value: Optional[Decimal]) -> Optional[str]:
    """Serialize for JSON responses ('1000.00'); None stays None."""
    if value is None:
        return None
    return str(to_decimal(value))
