"""Payroll sheet calculations."""

from payroll_sheet.calculators.aggregator import aggregate_totals, sheet_totals
from payroll_sheet.calculators.csv_export import CSV_HEADER, export_filename, to_csv
from payroll_sheet.calculators.currency import format_currency
from payroll_sheet.calculators.row_calculator import compute_row, compute_rows
from payroll_sheet.calculators.types import (
    ComputedRow,
    EmployeeRow,
    PayrollSheet,
    SheetTotals,
)

__all__ = [
    "CSV_HEADER",
    "ComputedRow",
    "EmployeeRow",
    "PayrollSheet",
    "SheetTotals",
    "aggregate_totals",
    "compute_row",
    "compute_rows",
    "export_filename",
    "format_currency",
    "sheet_totals",
    "to_csv",
]
