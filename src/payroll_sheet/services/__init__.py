"""Payroll sheet services."""

from payroll_sheet.services.sheet_service import (
    RowNotFoundError,
    SheetFormatError,
    SheetService,
    SheetView,
    coerce_sheet_dict,
    default_row,
    new_sheet,
    number_or_zero,
)
from payroll_sheet.services.sheet_store import SheetStore

__all__ = [
    "RowNotFoundError",
    "SheetFormatError",
    "SheetService",
    "SheetStore",
    "SheetView",
    "coerce_sheet_dict",
    "default_row",
    "new_sheet",
    "number_or_zero",
]
