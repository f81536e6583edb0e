"""Per-employee pay calculation."""

from __future__ import annotations

from collections.abc import Iterable

from payroll_sheet.calculators.types import ComputedRow, EmployeeRow


def compute_row(row: EmployeeRow) -> ComputedRow:
    """Derive pay figures for one employee row.

    Calculation pipeline (fixed order, float arithmetic):
    1) base = hours * rate
    2) overtime = OT hours * rate * OT multiplier
    3) gross = base + overtime + bonus
    4) taxable = max(0, gross - pre-tax deductions)
    5) taxes = taxable * (tax % / 100)
    6) net = taxable - taxes - post-tax deductions

    Nothing is rounded here; net may go negative.
    """
    base_pay = row.hours * row.hourly_rate
    overtime_pay = row.overtime_hours * row.hourly_rate * row.overtime_multiplier
    gross_pay = base_pay + overtime_pay + row.bonus
    taxable_income = max(0.0, gross_pay - row.pre_tax_deductions)
    taxes = taxable_income * (row.tax_rate_pct / 100)
    net_pay = taxable_income - taxes - row.post_tax_deductions

    return ComputedRow(
        id=row.id,
        name=row.name,
        hours=row.hours,
        hourly_rate=row.hourly_rate,
        overtime_hours=row.overtime_hours,
        overtime_multiplier=row.overtime_multiplier,
        bonus=row.bonus,
        pre_tax_deductions=row.pre_tax_deductions,
        tax_rate_pct=row.tax_rate_pct,
        post_tax_deductions=row.post_tax_deductions,
        gross_pay=gross_pay,
        taxable_income=taxable_income,
        taxes=taxes,
        net_pay=net_pay,
    )


def compute_rows(rows: Iterable[EmployeeRow]) -> list[ComputedRow]:
    """Compute every row, keeping sheet order."""
    return [compute_row(row) for row in rows]
