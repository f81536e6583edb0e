"""Pytest fixtures for payroll sheet tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from payroll_sheet.api.app import create_app
from payroll_sheet.api.dependencies import get_db_session
from payroll_sheet.calculators import EmployeeRow, PayrollSheet
from payroll_sheet.database import create_schema, get_engine, make_session_factory
from payroll_sheet.services import SheetService, SheetStore

TEST_STORAGE_KEY = "payroll-state"


@pytest.fixture
def example_row() -> EmployeeRow:
    """Row with overtime, bonus and both kinds of deduction."""
    return EmployeeRow(
        id="row-1",
        name="Alice Smith",
        hours=40.0,
        hourly_rate=25.0,
        overtime_hours=5.0,
        overtime_multiplier=1.5,
        bonus=100.0,
        pre_tax_deductions=50.0,
        tax_rate_pct=20.0,
        post_tax_deductions=10.0,
    )


@pytest.fixture
def example_sheet(example_row: EmployeeRow) -> PayrollSheet:
    """Two-row sheet."""
    bob = EmployeeRow(
        id="row-2",
        name="Bob Jones",
        hours=38.5,
        hourly_rate=30.0,
        overtime_multiplier=1.5,
        tax_rate_pct=15.0,
    )
    return PayrollSheet(
        company="Acme Inc.",
        period_label="Nov 1 - Nov 15",
        rows=(example_row, bob),
    )


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Engine over a throwaway SQLite file with the schema created."""
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'sheet.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Database session for each test."""
    factory = make_session_factory(engine)
    async with factory() as session:
        yield session


@pytest.fixture
def store(session: AsyncSession) -> SheetStore:
    return SheetStore(session, TEST_STORAGE_KEY)


@pytest.fixture
def service(store: SheetStore) -> SheetService:
    return SheetService(store)


@pytest_asyncio.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, wired to the test database."""
    factory = make_session_factory(engine)

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
