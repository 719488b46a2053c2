# File: tests/test_shifts_api.py
"""Tests for the shift ledger HTTP endpoints."""

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from shiftledger.models.app_config import AppConfig

SALE_PAYLOAD = {
    "payment_method": "cash",
    "items": [
        {"product_name": "Shirt", "color": "Blue", "size": "M", "quantity": 2, "unit_price": "50.00", "purchase_price": "30.00"},
    ],
}


async def _ring_up_sale_and_expense(client: AsyncClient) -> None:
    """100.00 cash sale plus a 20.00 expense."""
    response = await client.post("/api/v1/sales", json=SALE_PAYLOAD)
    assert response.status_code == 201
    response = await client.post("/api/v1/daily-expenses", json={"amount": "20.00", "notes": "Cleaning"})
    assert response.status_code == 201


async def _calculate(client: AsyncClient) -> dict:
    response = await client.post("/api/v1/shifts/calculate")
    assert response.status_code == 200
    return response.json()


async def _close(client: AsyncClient, actual: str) -> dict:
    preview = await _calculate(client)
    response = await client.post(
        "/api/v1/shifts/close",
        json={"preview_id": preview["id"], "actual_amount": actual},
    )
    assert response.status_code == 200
    return response.json()


class TestCalculate:
    @pytest.mark.asyncio
    async def test_calculate_open_shift(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)

        preview = await _calculate(client)

        assert preview["id"].startswith("SHIFT-")
        assert preview["id"].endswith("Z")
        assert preview["cutoff"] is None
        assert len(preview["sales"]) == 1
        assert len(preview["expenses"]) == 1
        summary = preview["summary"]
        assert Decimal(summary["total_cash_sales"]) == Decimal("100.00")
        assert Decimal(summary["total_daily_expenses"]) == Decimal("20.00")
        assert Decimal(summary["total_returns_value"]) == Decimal("0")
        assert Decimal(summary["expected_in_drawer"]) == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_current_does_not_replace_draft(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)
        preview = await _calculate(client)

        current = await client.get("/api/v1/shifts/current")
        assert current.status_code == 200
        assert current.json()["summary"] == preview["summary"]

        response = await client.post(
            "/api/v1/shifts/close",
            json={"preview_id": preview["id"], "actual_amount": "80.00"},
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_current_is_read_only(self, client: AsyncClient):
        response = await client.get("/api/v1/shifts/current")

        assert response.status_code == 200
        assert response.json()["cutoff"] is None
        rows = await client.db_session.scalar(select(func.count()).select_from(AppConfig))
        assert rows == 0

    @pytest.mark.asyncio
    async def test_calculate_requires_operator(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.post("/api/v1/shifts/calculate")

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_calculate_with_operator_header(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.post(
            "/api/v1/shifts/calculate", headers={"X-Operator": "bob"}
        )

        assert response.status_code == 200


class TestClose:
    @pytest.mark.asyncio
    async def test_close_with_deficit(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)

        data = await _close(client, "75.00")

        shift = data["shift"]
        assert shift["ended_by"] == "alice"
        assert data["new_cutoff"] == shift["ended_at"]
        assert Decimal(shift["summary"]["expected_in_drawer"]) == Decimal("80.00")
        assert Decimal(shift["reconciliation"]["actual"]) == Decimal("75.00")
        assert Decimal(shift["reconciliation"]["difference"]) == Decimal("-5.00")
        assert shift["reconciliation"]["type"] == "deficit"

        synthetic = data["synthetic_expense"]
        assert Decimal(synthetic["amount"]) == Decimal("5.00")
        assert synthetic["is_deficit"] is True
        assert synthetic["notes"] == f"Deficit from shift {shift['id']}"
        assert synthetic["id"] in [e["id"] for e in shift["expenses"]]

        expenses = (await client.get("/api/v1/daily-expenses")).json()
        assert sum(1 for e in expenses if e["is_deficit"]) == 1

    @pytest.mark.asyncio
    async def test_close_with_surplus(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)

        data = await _close(client, "85.00")

        assert data["synthetic_expense"] is None
        assert data["shift"]["reconciliation"]["type"] == "surplus"

    @pytest.mark.asyncio
    async def test_close_advances_cutoff(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)
        data = await _close(client, "80.00")

        preview = await _calculate(client)

        assert preview["cutoff"] == data["new_cutoff"]
        assert preview["sales"] == []
        assert preview["expenses"] == []

        health = (await client.get("/health")).json()
        assert health["last_shift_report_time"] is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actual", [None, "-5.00", "abc"])
    async def test_close_rejects_bad_cash_count(self, client: AsyncClient, actual):
        await _ring_up_sale_and_expense(client)
        preview = await _calculate(client)

        payload = {"preview_id": preview["id"]}
        if actual is not None:
            payload["actual_amount"] = actual
        response = await client.post("/api/v1/shifts/close", json=payload)

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert (await client.get("/api/v1/shifts")).json() == []

    @pytest.mark.asyncio
    async def test_client_sale_time_is_ignored(self, client: AsyncClient):
        future = {**SALE_PAYLOAD, "created_at": "2999-01-01T00:00:00"}
        response = await client.post("/api/v1/sales", json=future)
        assert response.status_code == 201
        assert not response.json()["created_at"].startswith("2999")

        first = await _close(client, "100.00")
        next_window = await _calculate(client)

        assert Decimal(first["shift"]["summary"]["total_cash_sales"]) == Decimal("100.00")
        assert next_window["sales"] == []
        assert Decimal(next_window["summary"]["total_cash_sales"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_close_rejects_preview_missing_a_later_sale(self, client: AsyncClient):
        preview = await _calculate(client)
        await client.post("/api/v1/sales", json=SALE_PAYLOAD)

        response = await client.post(
            "/api/v1/shifts/close",
            json={"preview_id": preview["id"], "actual_amount": "0.00"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "STALE_PREVIEW"
        assert (await client.get("/api/v1/shifts")).json() == []

    @pytest.mark.asyncio
    async def test_close_unknown_preview(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/shifts/close",
            json={"preview_id": "SHIFT-nope", "actual_amount": "1.00"},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestHistory:
    @pytest.mark.asyncio
    async def test_list_and_get(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)
        first = (await _close(client, "80.00"))["shift"]
        second = (await _close(client, "0.00"))["shift"]

        shifts = (await client.get("/api/v1/shifts")).json()
        assert [s["id"] for s in shifts] == [second["id"], first["id"]]

        response = await client.get(f"/api/v1/shifts/{first['id']}")
        assert response.status_code == 200
        assert Decimal(response.json()["summary"]["total_sales"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_filter_by_date(self, client: AsyncClient):
        shift = (await _close(client, "0.00"))["shift"]
        ended_on = shift["ended_at"][:10]

        same_day = await client.get("/api/v1/shifts", params={"on_date": ended_on})
        other_day = await client.get("/api/v1/shifts", params={"on_date": "2001-01-01"})

        assert [s["id"] for s in same_day.json()] == [shift["id"]]
        assert other_day.json() == []

    @pytest.mark.asyncio
    async def test_get_unknown_shift(self, client: AsyncClient):
        response = await client.get("/api/v1/shifts/SHIFT-missing")

        assert response.status_code == 404


class TestReopen:
    @pytest.mark.asyncio
    async def test_reopen_and_undo(self, client: AsyncClient):
        await _ring_up_sale_and_expense(client)
        closed = await _close(client, "75.00")
        shift_id = closed["shift"]["id"]

        response = await client.post(f"/api/v1/shifts/{shift_id}/reopen")
        assert response.status_code == 200
        reopened = response.json()
        assert reopened["removed_shift_ids"] == [shift_id]
        assert reopened["removed_deficit_expense_ids"] == [closed["synthetic_expense"]["id"]]
        assert reopened["new_cutoff"] is None
        assert reopened["undo_token"]
        assert (await client.get("/api/v1/shifts")).json() == []

        preview = await _calculate(client)
        assert Decimal(preview["summary"]["expected_in_drawer"]) == Decimal("80.00")

        response = await client.post(
            "/api/v1/shifts/reopen/undo", json={"undo_token": reopened["undo_token"]}
        )
        assert response.status_code == 200
        undone = response.json()
        assert undone["restored_shift_ids"] == [shift_id]
        assert undone["cutoff"] == closed["new_cutoff"]
        assert [s["id"] for s in (await client.get("/api/v1/shifts")).json()] == [shift_id]

        # Token is spent
        response = await client.post(
            "/api/v1/shifts/reopen/undo", json={"undo_token": reopened["undo_token"]}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "UNDO_EXPIRED"

    @pytest.mark.asyncio
    async def test_reopen_cascades(self, client: AsyncClient):
        first = (await _close(client, "0.00"))["shift"]
        second = (await _close(client, "0.00"))["shift"]
        third = (await _close(client, "0.00"))["shift"]

        response = await client.post(f"/api/v1/shifts/{second['id']}/reopen")

        assert response.json()["removed_shift_ids"] == [second["id"], third["id"]]
        assert response.json()["new_cutoff"] == first["ended_at"]

    @pytest.mark.asyncio
    async def test_undo_after_window(self, client: AsyncClient):
        client.app.state.undo_register.window = timedelta(0)
        shift = (await _close(client, "0.00"))["shift"]
        token = (await client.post(f"/api/v1/shifts/{shift['id']}/reopen")).json()["undo_token"]

        response = await client.post("/api/v1/shifts/reopen/undo", json={"undo_token": token})

        assert response.status_code == 400
        assert response.json()["code"] == "UNDO_EXPIRED"
        assert (await client.get("/api/v1/shifts")).json() == []

    @pytest.mark.asyncio
    async def test_reopen_unknown_shift(self, client: AsyncClient):
        response = await client.post("/api/v1/shifts/SHIFT-missing/reopen")

        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Shift"
