"""Pydantic schemas for API request/response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from payroll_sheet.calculators import ComputedRow, PayrollSheet, SheetTotals
from payroll_sheet.services import SheetView
from payroll_sheet.services.sheet_service import coerce_sheet_dict


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Row schemas
# ============================================================================


class EmployeeRowSchema(CamelModel):
    """Raw inputs for one employee."""

    id: str = ""
    name: str = ""
    hours: float = 0.0
    hourly_rate: float = 0.0
    overtime_hours: float = 0.0
    overtime_multiplier: float = 1.5
    bonus: float = 0.0
    pre_tax_deductions: float = 0.0
    tax_rate_pct: float = 0.0
    post_tax_deductions: float = 0.0


class RowInput(CamelModel):
    """Raw inputs for one employee as sent by a client.

    Numeric fields accept raw input text; anything unparsable counts as 0.
    """

    id: str | None = None
    name: str | None = None
    hours: float | str | None = None
    hourly_rate: float | str | None = None
    overtime_hours: float | str | None = None
    overtime_multiplier: float | str | None = None
    bonus: float | str | None = None
    pre_tax_deductions: float | str | None = None
    tax_rate_pct: float | str | None = None
    post_tax_deductions: float | str | None = None


class ComputedRowSchema(EmployeeRowSchema):
    """Raw inputs plus derived pay figures."""

    gross_pay: float
    taxable_income: float
    taxes: float
    net_pay: float


class RowPatch(CamelModel):
    """Partial update of a row. Numeric fields accept raw input text."""

    name: str | None = None
    hours: float | str | None = None
    hourly_rate: float | str | None = None
    overtime_hours: float | str | None = None
    overtime_multiplier: float | str | None = None
    bonus: float | str | None = None
    pre_tax_deductions: float | str | None = None
    tax_rate_pct: float | str | None = None
    post_tax_deductions: float | str | None = None

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# ============================================================================
# Sheet schemas
# ============================================================================


class TotalsSchema(CamelModel):
    """Sheet totals."""

    gross: float
    taxable: float
    taxes: float
    net: float

    @classmethod
    def from_totals(cls, totals: SheetTotals) -> "TotalsSchema":
        return cls(**totals.to_dict())


class FormattedSheet(CamelModel):
    """Currency strings for display."""

    rows: list[dict[str, str]]
    totals: dict[str, str]


class SheetResponse(CamelModel):
    """A sheet with computed rows, totals and display strings."""

    company: str
    period_label: str
    rows: list[ComputedRowSchema]
    totals: TotalsSchema
    formatted: FormattedSheet

    @classmethod
    def from_view(cls, view: SheetView) -> "SheetResponse":
        return cls(
            company=view.sheet.company,
            period_label=view.sheet.period_label,
            rows=[computed_row_schema(row) for row in view.rows],
            totals=TotalsSchema.from_totals(view.totals),
            formatted=FormattedSheet(
                rows=view.formatted_rows(),
                totals=view.formatted_totals(),
            ),
        )


class SheetDetailsUpdate(CamelModel):
    """Company and pay-period label."""

    company: str | None = None
    period_label: str | None = None


class ClearRequest(CamelModel):
    """Clear request; nothing happens unless confirmed."""

    confirm: bool = False


class ClearResponse(SheetResponse):
    """Sheet after a clear request."""

    cleared: bool


class CalculateRequest(CamelModel):
    """A sheet to calculate without storing it."""

    company: str = ""
    period_label: str = ""
    rows: list[RowInput] = []

    def to_sheet(self) -> PayrollSheet:
        """Build the sheet, coercing row inputs the same way stored sheets are."""
        return coerce_sheet_dict(self.model_dump(by_alias=True, exclude_none=True))


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None


def computed_row_schema(row: ComputedRow) -> ComputedRowSchema:
    return ComputedRowSchema.model_validate(row, from_attributes=True)
