"""Sheet-level totals."""

from __future__ import annotations

from collections.abc import Iterable

from payroll_sheet.calculators.row_calculator import compute_rows
from payroll_sheet.calculators.types import ComputedRow, PayrollSheet, SheetTotals


def aggregate_totals(rows: Iterable[ComputedRow]) -> SheetTotals:
    """Sum gross, taxable, taxes and net across computed rows.

    An empty iterable yields all-zero totals.
    """
    gross = 0.0
    taxable = 0.0
    taxes = 0.0
    net = 0.0
    for row in rows:
        gross += row.gross_pay
        taxable += row.taxable_income
        taxes += row.taxes
        net += row.net_pay
    return SheetTotals(gross=gross, taxable=taxable, taxes=taxes, net=net)


def sheet_totals(sheet: PayrollSheet) -> SheetTotals:
    """Compute every row of a sheet and aggregate the results."""
    return aggregate_totals(compute_rows(sheet.rows))
