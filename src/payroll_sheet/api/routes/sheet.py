"""Payroll sheet API endpoints."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Response, status

from payroll_sheet.api.dependencies import Service
from payroll_sheet.api.schemas import (
    CalculateRequest,
    ClearRequest,
    ClearResponse,
    EmployeeRowSchema,
    ErrorResponse,
    RowPatch,
    SheetDetailsUpdate,
    SheetResponse,
)
from payroll_sheet.services import RowNotFoundError
from payroll_sheet.services.sheet_service import build_view

router = APIRouter(tags=["sheet"])


def _row_not_found(e: RowNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(e),
    )


# ============================================================================
# Sheet
# ============================================================================


@router.get("/sheet", response_model=SheetResponse)
async def get_sheet(service: Service) -> SheetResponse:
    """Get the stored sheet with computed rows and totals."""
    return SheetResponse.from_view(await service.view())


@router.put("/sheet/details", response_model=SheetResponse)
async def update_details(service: Service, payload: SheetDetailsUpdate) -> SheetResponse:
    """Set the company name and/or pay-period label."""
    sheet = await service.update_details(
        company=payload.company,
        period_label=payload.period_label,
    )
    return SheetResponse.from_view(build_view(sheet))


@router.post("/sheet/clear", response_model=ClearResponse)
async def clear_sheet(service: Service, payload: ClearRequest) -> ClearResponse:
    """Replace the sheet with a fresh one. Requires confirm=true."""
    sheet, cleared = await service.clear(lambda _prompt: payload.confirm)
    view = SheetResponse.from_view(build_view(sheet))
    return ClearResponse(**view.model_dump(), cleared=cleared)


@router.get(
    "/sheet/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_sheet(service: Service) -> Response:
    """Download the sheet as CSV."""
    filename, content = await service.export_csv()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ============================================================================
# Rows
# ============================================================================


@router.post(
    "/sheet/rows",
    response_model=EmployeeRowSchema,
    status_code=status.HTTP_201_CREATED,
)
async def add_row(service: Service) -> EmployeeRowSchema:
    """Append a row with default values."""
    row = await service.add_row()
    return EmployeeRowSchema.model_validate(row, from_attributes=True)


@router.patch(
    "/sheet/rows/{row_id}",
    response_model=EmployeeRowSchema,
    responses={404: {"model": ErrorResponse}},
)
async def update_row(
    service: Service,
    row_id: Annotated[str, Path()],
    payload: RowPatch,
) -> EmployeeRowSchema:
    """Replace some fields of a row."""
    try:
        row = await service.update_row(row_id, payload.changes())
    except RowNotFoundError as e:
        raise _row_not_found(e)
    return EmployeeRowSchema.model_validate(row, from_attributes=True)


@router.delete(
    "/sheet/rows/{row_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def remove_row(service: Service, row_id: Annotated[str, Path()]) -> Response:
    """Remove a row."""
    try:
        await service.remove_row(row_id)
    except RowNotFoundError as e:
        raise _row_not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Stateless calculation
# ============================================================================


@router.post("/calculate", response_model=SheetResponse)
async def calculate(payload: CalculateRequest) -> SheetResponse:
    """Calculate a posted sheet without touching storage."""
    return SheetResponse.from_view(build_view(payload.to_sheet()))
