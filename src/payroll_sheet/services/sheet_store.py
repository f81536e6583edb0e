"""Local persistence for the payroll sheet."""

from __future__ import annotations

import asyncio
import json
import logging
import weakref

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_sheet.calculators import PayrollSheet
from payroll_sheet.models import SheetState
from payroll_sheet.services.sheet_service import (
    SheetFormatError,
    coerce_sheet_dict,
    new_sheet,
)

logger = logging.getLogger(__name__)

# One lock per storage key, per event loop.
_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]] = (
    weakref.WeakKeyDictionary()
)


def sheet_lock(storage_key: str) -> asyncio.Lock:
    """Return the lock that serializes load-modify-save on a storage key."""
    loop_locks = _locks.setdefault(asyncio.get_running_loop(), {})
    lock = loop_locks.get(storage_key)
    if lock is None:
        lock = loop_locks[storage_key] = asyncio.Lock()
    return lock


class SheetStore:
    """Keyed load/save of one sheet, stored as JSON text.

    A missing or unreadable stored value never propagates: load() falls
    back to a fresh default sheet. Callers that load, change and save
    hold ``lock`` for the whole cycle.
    """

    def __init__(self, session: AsyncSession, storage_key: str):
        self.session = session
        self.storage_key = storage_key

    @property
    def lock(self) -> asyncio.Lock:
        return sheet_lock(self.storage_key)

    async def load(self) -> PayrollSheet:
        """Load the stored sheet.

        If nothing usable is stored, a new default sheet is saved and
        returned. If row ids had to be issued while reading, the sheet is
        saved back. Either way row ids stay stable across later loads.
        """
        payload = await self.session.scalar(
            select(SheetState.payload).where(SheetState.storage_key == self.storage_key)
        )
        if payload is not None:
            try:
                data = json.loads(payload)
                sheet = coerce_sheet_dict(data)
            except (json.JSONDecodeError, SheetFormatError) as e:
                logger.warning(
                    "Stored sheet '%s' could not be read, using a new sheet: %s",
                    self.storage_key,
                    e,
                )
            else:
                stored_ids = [row.get("id") for row in data.get("rows", [])]
                if stored_ids != sheet.row_ids():
                    logger.info("Issued row ids for stored sheet '%s'", self.storage_key)
                    await self.save(sheet)
                return sheet

        sheet = new_sheet()
        await self.save(sheet)
        return sheet

    async def save(self, sheet: PayrollSheet) -> None:
        """Write the sheet under the storage key, inserting or replacing it."""
        payload = json.dumps(sheet.to_dict())
        stmt = insert(SheetState).values(storage_key=self.storage_key, payload=payload)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SheetState.storage_key],
            set_={"payload": payload, "updated_at": func.now()},
        )
        await self.session.execute(stmt)
        await self.session.commit()
