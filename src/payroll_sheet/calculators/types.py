"""Type definitions for the payroll sheet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Python attribute -> persisted (camelCase) key, in column order
NUMERIC_FIELDS: dict[str, str] = {
    "hours": "hours",
    "hourly_rate": "hourlyRate",
    "overtime_hours": "overtimeHours",
    "overtime_multiplier": "overtimeMultiplier",
    "bonus": "bonus",
    "pre_tax_deductions": "preTaxDeductions",
    "tax_rate_pct": "taxRatePct",
    "post_tax_deductions": "postTaxDeductions",
}

COMPUTED_FIELDS: dict[str, str] = {
    "gross_pay": "grossPay",
    "taxable_income": "taxableIncome",
    "taxes": "taxes",
    "net_pay": "netPay",
}


@dataclass(frozen=True)
class EmployeeRow:
    """One employee's raw inputs for a pay period.

    The id only addresses the row within its sheet; it carries no meaning
    beyond that and is never part of the exported figures.
    """

    id: str
    name: str = ""
    hours: float = 0.0
    hourly_rate: float = 0.0
    overtime_hours: float = 0.0
    overtime_multiplier: float = 1.5
    bonus: float = 0.0
    pre_tax_deductions: float = 0.0
    tax_rate_pct: float = 0.0  # 0-100, not range-enforced
    post_tax_deductions: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the persisted (camelCase) representation."""
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        for attr, key in NUMERIC_FIELDS.items():
            data[key] = getattr(self, attr)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmployeeRow:
        """Build a row from its persisted representation.

        Missing numeric keys take the field defaults. Values are used as
        given: coercing user input to finite numbers happens before this.
        """
        kwargs: dict[str, Any] = {"id": data["id"], "name": data.get("name", "")}
        for attr, key in NUMERIC_FIELDS.items():
            if key in data:
                kwargs[attr] = data[key]
        return cls(**kwargs)


@dataclass(frozen=True)
class ComputedRow(EmployeeRow):
    """EmployeeRow plus derived pay figures (see compute_row)."""

    gross_pay: float = 0.0
    taxable_income: float = 0.0
    taxes: float = 0.0
    net_pay: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        for attr, key in COMPUTED_FIELDS.items():
            data[key] = getattr(self, attr)
        return data


@dataclass(frozen=True)
class PayrollSheet:
    """Aggregate root: sheet metadata plus rows in display order."""

    company: str = ""
    period_label: str = ""
    rows: tuple[EmployeeRow, ...] = field(default_factory=tuple)

    def row_ids(self) -> list[str]:
        return [row.id for row in self.rows]

    def find_row(self, row_id: str) -> EmployeeRow | None:
        for row in self.rows:
            if row.id == row_id:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable persisted shape."""
        return {
            "periodLabel": self.period_label,
            "company": self.company,
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayrollSheet:
        return cls(
            company=data.get("company", ""),
            period_label=data.get("periodLabel", ""),
            rows=tuple(EmployeeRow.from_dict(r) for r in data.get("rows", [])),
        )


@dataclass(frozen=True)
class SheetTotals:
    """Sheet-level sums of the derived figures."""

    gross: float = 0.0
    taxable: float = 0.0
    taxes: float = 0.0
    net: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "gross": self.gross,
            "taxable": self.taxable,
            "taxes": self.taxes,
            "net": self.net,
        }
