"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_sheet.config import get_settings
from payroll_sheet.database import init_db
from payroll_sheet.services import SheetService, SheetStore


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_sheet_service(db: DbSession) -> SheetService:
    """Build the sheet service over the configured storage key."""
    return SheetService(SheetStore(db, get_settings().storage_key))


# Type aliases for cleaner dependency injection
Service = Annotated[SheetService, Depends(get_sheet_service)]
