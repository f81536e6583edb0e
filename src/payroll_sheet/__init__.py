"""Payroll estimation sheet: pay calculation, totals and CSV export."""

__version__ = "0.1.0"
