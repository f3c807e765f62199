"""Number formatting for emitted SVG.

Saved designs are compared byte-for-byte, so coordinates are rounded the same
way every time: fixed decimal places, ties away from zero on the exact binary
value, trailing zeros dropped.
"""

import html
import math
from decimal import ROUND_HALF_UP, Decimal

_QUANTS = {}


def _quantize(value: float, places: int) -> Decimal:
    quant = _QUANTS.get(places)
    if quant is None:
        quant = _QUANTS[places] = Decimal(1).scaleb(-places)
    # numpy scalars are not accepted by Decimal
    return Decimal(float(value)).quantize(quant, rounding=ROUND_HALF_UP)


def attr(value) -> str:
    """Caller-supplied text made safe inside a double-quoted attribute."""
    return html.escape(str(value), quote=True)


def fixed(value: float, places: int) -> str:
    """``value`` with exactly ``places`` decimals (``1.5 -> "1.50"``)."""
    q = _quantize(value, places)
    if q == 0:
        q = abs(q)
    return f"{q:.{places}f}"


def fmt(value: float, places: int = 2) -> str:
    """Round to ``places`` decimals and print the shortest form (``3.10 -> "3.1"``)."""
    q = _quantize(value, places)
    if q == 0:
        return "0"
    return format(q.normalize(), "f")


def num(value) -> str:
    """Print a user-supplied number as-is (``3.0 -> "3"``, ``2.5 -> "2.5"``)."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def js_round(value: float) -> int:
    """Round half toward +inf."""
    return math.floor(value + 0.5)
