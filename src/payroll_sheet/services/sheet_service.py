"""Sheet editing service.

Owns everything around the pure calculations: default rows, input coercion,
row add/update/remove, the confirmed clear, and saving after every change.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from payroll_sheet.calculators import (
    ComputedRow,
    EmployeeRow,
    PayrollSheet,
    SheetTotals,
    aggregate_totals,
    compute_rows,
    export_filename,
    format_currency,
    to_csv,
)
from payroll_sheet.calculators.types import COMPUTED_FIELDS, NUMERIC_FIELDS

if TYPE_CHECKING:
    from payroll_sheet.services.sheet_store import SheetStore

logger = logging.getLogger(__name__)

CLEAR_PROMPT = "Clear all rows?"

ConfirmGate = Callable[[str], bool]


class RowNotFoundError(Exception):
    """Raised when a row id does not exist in the sheet."""

    def __init__(self, row_id: str):
        self.row_id = row_id
        super().__init__(f"Row '{row_id}' not found")


class SheetFormatError(ValueError):
    """Raised when a deserialized sheet does not have the expected shape."""


# ============================================================================
# Input coercion
# ============================================================================


def number_or_zero(value: Any) -> float:
    """Coerce user input to a finite float, defaulting to 0."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def new_row_id() -> str:
    return str(uuid4())


def default_row(row_id: str | None = None) -> EmployeeRow:
    """Create a row with the sheet's starting values."""
    return EmployeeRow(
        id=row_id or new_row_id(),
        name="",
        hours=40,
        hourly_rate=25,
        overtime_hours=0,
        overtime_multiplier=1.5,
        bonus=0,
        pre_tax_deductions=0,
        tax_rate_pct=20,
        post_tax_deductions=0,
    )


def new_sheet() -> PayrollSheet:
    """Create the known-good starting sheet: no metadata, one default row."""
    return PayrollSheet(company="", period_label="", rows=(default_row(),))


def coerce_sheet_dict(data: Any) -> PayrollSheet:
    """Build a well-typed sheet from an untrusted, deserialized structure.

    Numeric fields go through number_or_zero and text fields through str.
    Rows without an id, or whose id repeats an earlier one, get a fresh id.
    Raises SheetFormatError if the top-level shape is wrong.
    """
    if not isinstance(data, Mapping):
        raise SheetFormatError("Sheet must be a JSON object")
    raw_rows = data.get("rows", [])
    if not isinstance(raw_rows, list):
        raise SheetFormatError("Sheet 'rows' must be a list")

    rows: list[EmployeeRow] = []
    seen: set[str] = set()
    for raw in raw_rows:
        if not isinstance(raw, Mapping):
            raise SheetFormatError("Each row must be a JSON object")
        row_id = raw.get("id")
        row_id = str(row_id) if row_id not in (None, "") else ""
        if not row_id or row_id in seen:
            row_id = new_row_id()
        seen.add(row_id)

        numbers = {
            attr: number_or_zero(raw[key])
            for attr, key in NUMERIC_FIELDS.items()
            if key in raw
        }
        name = raw.get("name")
        rows.append(
            EmployeeRow(id=row_id, name="" if name is None else str(name), **numbers)
        )

    company = data.get("company")
    period_label = data.get("periodLabel")
    return PayrollSheet(
        company="" if company is None else str(company),
        period_label="" if period_label is None else str(period_label),
        rows=tuple(rows),
    )


# ============================================================================
# Sheet transitions (pure)
# ============================================================================


def with_details(
    sheet: PayrollSheet,
    company: str | None = None,
    period_label: str | None = None,
) -> PayrollSheet:
    """Return the sheet with company and/or pay-period label replaced."""
    changes: dict[str, str] = {}
    if company is not None:
        changes["company"] = company
    if period_label is not None:
        changes["period_label"] = period_label
    return replace(sheet, **changes)


def append_row(sheet: PayrollSheet, row: EmployeeRow | None = None) -> PayrollSheet:
    """Return the sheet with a row appended (a default row if none given)."""
    row = row or default_row()
    if sheet.find_row(row.id) is not None:
        raise ValueError(f"Row id '{row.id}' already exists")
    return replace(sheet, rows=sheet.rows + (row,))


def replace_row_fields(
    sheet: PayrollSheet, row_id: str, patch: Mapping[str, Any]
) -> PayrollSheet:
    """Return the sheet with some fields of one row replaced.

    Patch keys are row attribute names; numeric values are coerced.
    The row id itself cannot be patched.
    """
    changes: dict[str, Any] = {}
    for attr, value in patch.items():
        if attr == "name":
            changes[attr] = "" if value is None else str(value)
        elif attr in NUMERIC_FIELDS:
            changes[attr] = number_or_zero(value)
        else:
            raise ValueError(f"Unknown row field '{attr}'")

    found = False
    rows: list[EmployeeRow] = []
    for row in sheet.rows:
        if row.id == row_id:
            row = replace(row, **changes)
            found = True
        rows.append(row)

    if not found:
        raise RowNotFoundError(row_id)
    return replace(sheet, rows=tuple(rows))


def drop_row(sheet: PayrollSheet, row_id: str) -> PayrollSheet:
    """Return the sheet without the given row."""
    rows = tuple(row for row in sheet.rows if row.id != row_id)
    if len(rows) == len(sheet.rows):
        raise RowNotFoundError(row_id)
    return replace(sheet, rows=rows)


# ============================================================================
# Service
# ============================================================================


@dataclass
class SheetView:
    """A sheet with everything a screen needs to render it."""

    sheet: PayrollSheet
    rows: list[ComputedRow]
    totals: SheetTotals

    def formatted_rows(self) -> list[dict[str, str]]:
        """Currency strings for each row's computed figures."""
        return [
            {key: format_currency(getattr(row, attr)) for attr, key in COMPUTED_FIELDS.items()}
            for row in self.rows
        ]

    def formatted_totals(self) -> dict[str, str]:
        return {key: format_currency(value) for key, value in self.totals.to_dict().items()}


class SheetService:
    """Load-modify-save operations on the stored sheet.

    Every change is written back to the store immediately. Each operation
    holds the store's lock, so overlapping requests apply one after another.
    """

    def __init__(self, store: SheetStore):
        self.store = store

    async def get_sheet(self) -> PayrollSheet:
        async with self.store.lock:
            return await self.store.load()

    async def view(self) -> SheetView:
        """Load the sheet and compute rows and totals."""
        async with self.store.lock:
            sheet = await self.store.load()
        return build_view(sheet)

    async def update_details(
        self, company: str | None = None, period_label: str | None = None
    ) -> PayrollSheet:
        async with self.store.lock:
            sheet = with_details(await self.store.load(), company, period_label)
            await self.store.save(sheet)
        return sheet

    async def add_row(self) -> EmployeeRow:
        """Append a default row and return it."""
        row = default_row()
        async with self.store.lock:
            sheet = append_row(await self.store.load(), row)
            await self.store.save(sheet)
        logger.debug("Added row %s", row.id)
        return row

    async def update_row(self, row_id: str, patch: Mapping[str, Any]) -> EmployeeRow:
        """Replace fields of a row and return the updated row."""
        async with self.store.lock:
            sheet = replace_row_fields(await self.store.load(), row_id, patch)
            await self.store.save(sheet)
        return next(row for row in sheet.rows if row.id == row_id)

    async def remove_row(self, row_id: str) -> None:
        async with self.store.lock:
            sheet = drop_row(await self.store.load(), row_id)
            await self.store.save(sheet)
        logger.debug("Removed row %s", row_id)

    async def clear(self, confirm: ConfirmGate) -> tuple[PayrollSheet, bool]:
        """Replace the sheet with a fresh one if the gate confirms.

        Returns the resulting sheet and whether it was cleared.
        """
        async with self.store.lock:
            if not confirm(CLEAR_PROMPT):
                return await self.store.load(), False
            sheet = new_sheet()
            await self.store.save(sheet)
        logger.info("Sheet cleared")
        return sheet, True

    async def export_csv(self, today: date | None = None) -> tuple[str, str]:
        """Return (filename, csv_text) for the stored sheet."""
        async with self.store.lock:
            sheet = await self.store.load()
        return export_filename(today), to_csv(sheet)


def build_view(sheet: PayrollSheet) -> SheetView:
    """Compute rows and totals for a sheet."""
    rows = compute_rows(sheet.rows)
    return SheetView(sheet=sheet, rows=rows, totals=aggregate_totals(rows))
