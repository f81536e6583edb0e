"""API routes."""

from payroll_sheet.api.routes.health import router as health_router
from payroll_sheet.api.routes.sheet import router as sheet_router

__all__ = ["health_router", "sheet_router"]
