"""Persisted sheet state."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payroll_sheet.models.base import Base, TimestampMixin


class SheetState(Base, TimestampMixin):
    """A stored payroll sheet, kept as JSON text under a storage key."""

    __tablename__ = "sheet_state"

    storage_key: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
