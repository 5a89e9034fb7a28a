"""Integration tests for cash and exchange endpoints (requires running PG + Redis).

Pre-condition: alembic upgrade head

Uses the session-scoped client fixture from tests/integration/conftest.py.
All tests share one event loop: avoids asyncpg pool cross-loop error.
"""

import uuid

import pytest
from httpx import AsyncClient

from src.fx_common.enums import Role

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _agency() -> str:
    return f"AG-{uuid.uuid4().hex[:8].upper()}"


async def _set_balance(
    client: AsyncClient, headers: dict[str, str], owner: str | None, currency: str, amount: str
) -> None:
    resp = await client.post(
        "/api/v1/cash/accounts/adjust",
        json={"owner": owner, "currency": currency, "new_balance": amount, "reason": "test setup"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text


async def _balance(client: AsyncClient, headers: dict[str, str], currency: str) -> str:
    resp = await client.get("/api/v1/cash/balances", headers=headers)
    assert resp.status_code == 200, resp.text
    return next(b["balance"] for b in resp.json()["data"]["balances"] if b["currency"] == currency)


class TestBalances:
    async def test_unauthenticated_returns_401(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/cash/balances")
        assert resp.status_code == 401

    async def test_new_agency_reads_zero(self, client: AsyncClient, headers_for) -> None:
        agency = _agency()
        resp = await client.get(
            "/api/v1/cash/balances", headers=headers_for(Role.CASHIER, agency_id=agency)
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["owner"] == agency
        assert {b["currency"] for b in data["balances"]} == {"XAF", "USD", "EUR", "GBP"}
        assert all(b["balance"] in ("0", "0.00") for b in data["balances"])


class TestExchangeFlow:
    async def test_purchase_then_replenish_then_sell(
        self, client: AsyncClient, headers_for
    ) -> None:
        director = headers_for(Role.DIRECTOR)
        agency = _agency()
        await _set_balance(client, director, None, "XAF", "10000000")
        await _set_balance(client, director, None, "USD", "0")

        purchase = await client.post(
            "/api/v1/exchange/purchase",
            json={"source_amount": "10000000", "target_currency": "USD", "quoted_rate": "600"},
            headers=director,
        )
        assert purchase.status_code == 200, purchase.text
        assert purchase.json()["data"]["real_rate"] == "600.00"

        replenish = await client.post(
            "/api/v1/exchange/replenishment",
            json={"lines": [{"agency_id": agency, "currency": "USD", "amount": "100"}]},
            headers=director,
        )
        assert replenish.status_code == 200, replenish.text
        assert replenish.json()["data"]["head_office_balances"]["USD"] == "16566.67"

        cashier = headers_for(Role.CASHIER, agency_id=agency)
        sale = await client.post(
            "/api/v1/exchange/sale",
            json={
                "currency": "USD",
                "amount": "100",
                "day_rate": "610",
                "received_amount": "61000",
            },
            headers=cashier,
        )
        assert sale.status_code == 200, sale.text
        assert sale.json()["data"]["purchase_rate"] == "600.00"
        assert sale.json()["data"]["commission"] == "1000.00"

        commissions = await client.get("/api/v1/exchange/commissions", headers=cashier)
        assert commissions.json()["data"]["commissions"]["USD"] == "1000.00"

    async def test_overdraft_rejected_atomically(self, client: AsyncClient, headers_for) -> None:
        director = headers_for(Role.DIRECTOR)
        await _set_balance(client, director, None, "EUR", "50")
        agency_a, agency_b = _agency(), _agency()

        resp = await client.post(
            "/api/v1/exchange/replenishment",
            json={
                "lines": [
                    {"agency_id": agency_a, "currency": "EUR", "amount": "30"},
                    {"agency_id": agency_b, "currency": "EUR", "amount": "30"},
                ]
            },
            headers=director,
        )
        assert resp.status_code == 422
        assert resp.json()["kind"] == "INSUFFICIENT_FUNDS"

        balances = await client.get("/api/v1/cash/balances", headers=director)
        eur = next(b for b in balances.json()["data"]["balances"] if b["currency"] == "EUR")
        assert eur["balance"] == "50.00"

    async def test_uncovered_purchase_expense_leaves_balances(
        self, client: AsyncClient, headers_for
    ) -> None:
        director = headers_for(Role.DIRECTOR)
        await _set_balance(client, director, None, "XAF", "10000000")
        await _set_balance(client, director, None, "USD", "0")

        resp = await client.post(
            "/api/v1/exchange/purchase",
            json={
                "source_amount": "10000000",
                "target_currency": "USD",
                "quoted_rate": "600",
                "local_market": {"amount": "60000", "currency": "XAF"},
            },
            headers=director,
        )
        assert resp.status_code == 422
        assert resp.json()["kind"] == "INSUFFICIENT_FUNDS"

        assert await _balance(client, director, "XAF") == "10000000.00"
        assert await _balance(client, director, "USD") == "0.00"

    async def test_agency_buys_from_client(self, client: AsyncClient, headers_for) -> None:
        director = headers_for(Role.DIRECTOR)
        agency = _agency()
        await _set_balance(client, director, agency, "XAF", "200000")
        cashier = headers_for(Role.CASHIER, agency_id=agency)

        resp = await client.post(
            "/api/v1/exchange/client-purchase",
            json={
                "currency": "EUR",
                "amount": "200",
                "rate": "650",
                "paid_amount": "130000",
                "client": {"id_type": "passport", "id_number": "P998877"},
            },
            headers=cashier,
        )
        assert resp.status_code == 200, resp.text
        assert await _balance(client, cashier, "XAF") == "70000.00"
        assert await _balance(client, cashier, "EUR") == "200.00"

        shortfall = await client.post(
            "/api/v1/exchange/client-purchase",
            json={"currency": "EUR", "amount": "200", "rate": "650", "paid_amount": "130000"},
            headers=cashier,
        )
        assert shortfall.status_code == 422
        assert await _balance(client, cashier, "XAF") == "70000.00"
        assert await _balance(client, cashier, "EUR") == "200.00"

    async def test_ledger_verification_passes(self, client: AsyncClient, headers_for) -> None:
        resp = await client.get(
            "/api/v1/admin/verify-ledger", headers=headers_for(Role.SUPER_ADMIN)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["ok"] is True
