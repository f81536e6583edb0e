"""API endpoint tests.

Exercises the FastAPI routes against a temporary SQLite database.
"""

import asyncio
import csv
import io
import json

import pytest
from httpx import AsyncClient

from payroll_sheet.config import get_settings
from payroll_sheet.database import make_session_factory
from payroll_sheet.models import SheetState

pytestmark = pytest.mark.asyncio

EXAMPLE_ROW = {
    "id": "row-1",
    "name": "Alice Smith",
    "hours": 40,
    "hourlyRate": 25,
    "overtimeHours": 5,
    "overtimeMultiplier": 1.5,
    "bonus": 100,
    "preTaxDeductions": 50,
    "taxRatePct": 20,
    "postTaxDeductions": 10,
}


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"

    async def test_readiness_check(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.json() == {"status": "ready"}

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.json() == {"status": "alive"}


class TestSheetEndpoints:
    """Test reading and editing the stored sheet."""

    async def test_get_default_sheet(self, client: AsyncClient):
        """GET /api/v1/sheet starts with one default row."""
        response = await client.get("/api/v1/sheet")
        assert response.status_code == 200, response.text

        data = response.json()
        assert data["company"] == ""
        assert data["periodLabel"] == ""
        assert len(data["rows"]) == 1

        row = data["rows"][0]
        assert row["hours"] == 40
        assert row["hourlyRate"] == 25
        assert row["grossPay"] == 1000
        assert row["netPay"] == 800
        assert data["totals"] == {"gross": 1000, "taxable": 1000, "taxes": 200, "net": 800}
        assert data["formatted"]["totals"]["gross"] == "$1,000.00"
        assert data["formatted"]["rows"][0]["netPay"] == "$800.00"

    async def test_row_ids_stable(self, client: AsyncClient):
        first = (await client.get("/api/v1/sheet")).json()
        second = (await client.get("/api/v1/sheet")).json()
        assert first["rows"][0]["id"] == second["rows"][0]["id"]

    async def test_update_details(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/sheet/details",
            json={"company": "Acme Inc.", "periodLabel": "Nov 1 - Nov 15"},
        )
        assert response.status_code == 200, response.text

        data = (await client.get("/api/v1/sheet")).json()
        assert data["company"] == "Acme Inc."
        assert data["periodLabel"] == "Nov 1 - Nov 15"

    async def test_add_row(self, client: AsyncClient):
        response = await client.post("/api/v1/sheet/rows")
        assert response.status_code == 201, response.text
        new_id = response.json()["id"]

        data = (await client.get("/api/v1/sheet")).json()
        assert len(data["rows"]) == 2
        assert data["rows"][-1]["id"] == new_id

    async def test_patch_row(self, client: AsyncClient):
        """Partial update; unparsable numbers become zero."""
        row_id = (await client.get("/api/v1/sheet")).json()["rows"][0]["id"]

        response = await client.patch(
            f"/api/v1/sheet/rows/{row_id}",
            json={"name": "Dana", "overtimeHours": "2", "bonus": "abc"},
        )
        assert response.status_code == 200, response.text

        row = response.json()
        assert row["name"] == "Dana"
        assert row["overtimeHours"] == 2
        assert row["bonus"] == 0
        assert row["hours"] == 40

    async def test_patch_unknown_row(self, client: AsyncClient):
        response = await client.patch("/api/v1/sheet/rows/missing", json={"hours": 1})
        assert response.status_code == 404
        assert "missing" in response.json()["detail"]

    async def test_delete_row(self, client: AsyncClient):
        row_id = (await client.post("/api/v1/sheet/rows")).json()["id"]

        response = await client.delete(f"/api/v1/sheet/rows/{row_id}")
        assert response.status_code == 204

        response = await client.delete(f"/api/v1/sheet/rows/{row_id}")
        assert response.status_code == 404

    async def test_clear_requires_confirmation(self, client: AsyncClient):
        await client.put("/api/v1/sheet/details", json={"company": "Acme"})
        await client.post("/api/v1/sheet/rows")

        response = await client.post("/api/v1/sheet/clear", json={})
        assert response.status_code == 200
        data = response.json()
        assert data["cleared"] is False
        assert data["company"] == "Acme"
        assert len(data["rows"]) == 2

    async def test_clear_confirmed(self, client: AsyncClient):
        await client.put("/api/v1/sheet/details", json={"company": "Acme"})
        await client.post("/api/v1/sheet/rows")

        response = await client.post("/api/v1/sheet/clear", json={"confirm": True})
        data = response.json()
        assert data["cleared"] is True
        assert data["company"] == ""
        assert len(data["rows"]) == 1

    async def test_concurrent_adds_all_kept(self, client: AsyncClient):
        """Overlapping edits are applied one after another."""
        await client.get("/api/v1/sheet")

        responses = await asyncio.gather(
            *(client.post("/api/v1/sheet/rows") for _ in range(5))
        )

        assert [r.status_code for r in responses] == [201] * 5
        data = (await client.get("/api/v1/sheet")).json()
        assert len(data["rows"]) == 6
        assert {r.json()["id"] for r in responses} <= {row["id"] for row in data["rows"]}

    async def test_concurrent_first_loads(self, client: AsyncClient):
        """Simultaneous first reads all see the same saved default sheet."""
        responses = await asyncio.gather(*(client.get("/api/v1/sheet") for _ in range(3)))

        assert [r.status_code for r in responses] == [200] * 3
        ids = {r.json()["rows"][0]["id"] for r in responses}
        assert len(ids) == 1

    async def test_patch_row_stored_without_id(self, client: AsyncClient, engine):
        """A row stored without an id can be edited with the id it was given."""
        factory = make_session_factory(engine)
        async with factory() as session:
            session.add(SheetState(
                storage_key=get_settings().storage_key,
                payload=json.dumps({"rows": [{"name": "A", "hours": 1}]}),
            ))
            await session.commit()

        row_id = (await client.get("/api/v1/sheet")).json()["rows"][0]["id"]
        response = await client.patch(f"/api/v1/sheet/rows/{row_id}", json={"hours": 2})

        assert response.status_code == 200, response.text
        assert response.json()["hours"] == 2


class TestExportEndpoint:
    """Test CSV download."""

    async def test_export_csv(self, client: AsyncClient):
        row_id = (await client.get("/api/v1/sheet")).json()["rows"][0]["id"]
        await client.patch(f"/api/v1/sheet/rows/{row_id}", json={"name": 'Smith, John "Jr"'})

        response = await client.get("/api/v1/sheet/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith("attachment; filename=payroll_")
        assert disposition.endswith(".csv")

        records = list(csv.reader(io.StringIO(response.text, newline="")))
        assert records[0][0] == "Employee"
        assert records[1][0] == 'Smith, John "Jr"'
        assert records[1][9:] == ["1000", "1000", "200", "800"]
        assert not response.text.endswith("\n")


class TestCalculateEndpoint:
    """Test stateless calculation."""

    async def test_calculate(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/calculate",
            json={"company": "Acme", "rows": [EXAMPLE_ROW]},
        )
        assert response.status_code == 200, response.text

        data = response.json()
        row = data["rows"][0]
        assert row["grossPay"] == 1287.5
        assert row["taxableIncome"] == 1237.5
        assert row["taxes"] == 247.5
        assert row["netPay"] == 980
        assert data["totals"]["net"] == 980
        assert data["formatted"]["rows"][0]["grossPay"] == "$1,287.50"

    async def test_calculate_empty(self, client: AsyncClient):
        data = (await client.post("/api/v1/calculate", json={})).json()
        assert data["rows"] == []
        assert data["totals"] == {"gross": 0, "taxable": 0, "taxes": 0, "net": 0}

    async def test_calculate_does_not_store(self, client: AsyncClient):
        await client.post("/api/v1/calculate", json={"company": "Acme", "rows": [EXAMPLE_ROW]})

        data = (await client.get("/api/v1/sheet")).json()
        assert data["company"] == ""
        assert data["rows"][0]["id"] != "row-1"

    async def test_calculate_coerces_inputs(self, client: AsyncClient):
        """Unparsable or non-finite numbers count as zero, like edits do."""
        response = await client.post(
            "/api/v1/calculate",
            json={"rows": [
                {"hours": "nan", "hourlyRate": 25},
                {"hours": "abc", "hourlyRate": "25"},
                {"hours": "10", "hourlyRate": 25, "taxRatePct": None},
            ]},
        )
        assert response.status_code == 200, response.text

        rows = response.json()["rows"]
        assert rows[0]["hours"] == 0
        assert rows[0]["grossPay"] == 0
        assert rows[1]["hours"] == 0
        assert rows[1]["hourlyRate"] == 25
        assert rows[2]["grossPay"] == 250
        assert rows[2]["overtimeMultiplier"] == 1.5
        assert all(row["id"] for row in rows)
