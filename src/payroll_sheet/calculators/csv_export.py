"""CSV export of a payroll sheet."""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal

from payroll_sheet.calculators.row_calculator import compute_row
from payroll_sheet.calculators.types import COMPUTED_FIELDS, NUMERIC_FIELDS, PayrollSheet

CSV_HEADER: tuple[str, ...] = (
    "Employee",
    "Hours",
    "Rate",
    "OT Hours",
    "OT Mult",
    "Bonus",
    "Pre-Tax Ded",
    "Tax %",
    "Post-Tax Ded",
    "Gross",
    "Taxable",
    "Taxes",
    "Net",
)

_NEEDS_QUOTING = (",", '"', "\n")


def escape_csv_field(value: str) -> str:
    """Quote a free-text field if it holds a comma, quote or newline.

    Internal quotes are doubled, so any standard CSV reader gets the
    original string back.
    """
    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_number(value: float) -> str:
    """Render a number as plain decimal text.

    No symbols, grouping or fixed places: the shortest digits that
    round-trip, integral values without a trailing ``.0``, and positional
    notation for magnitudes from 1e-6 up to 1e21. Outside that range the
    exponent form is ``1e-7`` / ``1e+21``.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    magnitude = abs(value)
    if value == 0 or 1e-6 <= magnitude < 1e21:
        digits = Decimal(repr(value))
        if value.is_integer():
            return str(int(digits))
        return format(digits, "f")
    mantissa, exponent = repr(value).split("e")
    return f"{mantissa}e{exponent[0]}{exponent[1:].lstrip('0')}"


def to_csv(sheet: PayrollSheet) -> str:
    """Render the sheet as CSV text.

    Header line, then one line per row in sheet order with the raw inputs
    followed by the computed figures. Lines are joined with ``\\n`` and no
    trailing newline is added.
    """
    lines = [",".join(CSV_HEADER)]
    for row in sheet.rows:
        computed = compute_row(row)
        fields = [escape_csv_field(computed.name)]
        fields.extend(format_number(getattr(computed, attr)) for attr in NUMERIC_FIELDS)
        fields.extend(format_number(getattr(computed, attr)) for attr in COMPUTED_FIELDS)
        lines.append(",".join(fields))
    return "\n".join(lines)


def export_filename(today: date | None = None) -> str:
    """Return the download filename for a CSV export, stamped with the date."""
    stamp = (today or date.today()).isoformat()
    return f"payroll_{stamp}.csv"
