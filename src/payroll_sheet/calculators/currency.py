"""Display formatting for money amounts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def format_currency(amount: float) -> str:
    """Format an amount as US dollars for display, e.g. ``$1,234.50``.

    Half cents round away from zero. Display only: the rounded text never
    feeds back into stored or exported values.
    """
    cents = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    if amount < 0:
        return f"-${-cents:,.2f}"
    return f"${cents:,.2f}"
