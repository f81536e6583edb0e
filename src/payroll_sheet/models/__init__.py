"""ORM models."""

from payroll_sheet.models.base import Base, TimestampMixin
from payroll_sheet.models.sheet_state import SheetState

__all__ = ["Base", "SheetState", "TimestampMixin"]
