"""Integration tests for the credits API endpoints"""

from datetime import datetime
from decimal import Decimal

import pytest
from httpx import AsyncClient


class TestCreditsAPIIntegration:
    """Integration test suite for /credits endpoints"""

    @pytest.mark.asyncio
    async def test_check_creates_account_with_monthly_allocation(self, client: AsyncClient):
        """POST /credits/check prices the action and lazily creates the account"""
        response = await client.post(
            "/credits/check",
            json={"action": "nano-banana-pro"},
            headers={"X-Account-Id": "user_api_1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sufficient"] is True
        assert Decimal(data["balance"]) == Decimal("50")
        assert Decimal(data["cost"]) == Decimal("2")

    @pytest.mark.asyncio
    async def test_deduct_and_replay(self, client: AsyncClient, internal_headers):
        """POST /credits/deduct from a backend service charges once per idempotency key"""
        # Arrange
        payload = {
            "accountId": "user_api_2",
            "action": "nano-banana",
            "metadata": {"prompt": "a cat in a hat"},
            "idempotencyKey": "gen_api_1",
        }

        # Act
        first = await client.post("/credits/deduct", json=payload, headers=internal_headers)
        second = await client.post("/credits/deduct", json=payload, headers=internal_headers)

        # Assert
        assert first.status_code == 200
        assert second.status_code == 200
        data = first.json()
        assert data["ok"] is True
        assert Decimal(data["newBalance"]) == Decimal("49.5")
        assert Decimal(data["cost"]) == Decimal("0.5")
        assert second.json()["transactionId"] == data["transactionId"]

        history = await client.get("/credits/user_api_2/transactions", params={"kind": "GENERATION_SPEND"})
        assert history.json()["total"] == 1
        spend = history.json()["transactions"][0]
        assert spend["metadata"] == {"prompt": "a cat in a hat", "action": "nano-banana"}

    @pytest.mark.asyncio
    async def test_deduct_insufficient_balance_returns_409(self, client: AsyncClient):
        """POST /credits/deduct beyond the balance returns 409 and changes nothing"""
        headers = {"X-Account-Id": "user_api_3"}
        await client.post("/credits/deduct", json={"cost": "49"}, headers=headers)

        response = await client.post("/credits/deduct", json={"cost": "2"}, headers=headers)

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "INSUFFICIENT_BALANCE"
        assert error["message"].startswith("Insufficient credits. Required: 2, Available: 1")

        stats = await client.get("/credits/user_api_3")
        assert Decimal(stats.json()["balance"]) == Decimal("1")

    @pytest.mark.asyncio
    async def test_deduct_validation_errors(self, client: AsyncClient):
        """Negative cost and a missing account id are rejected with 400"""
        negative = await client.post(
            "/credits/deduct", json={"cost": "-1"}, headers={"X-Account-Id": "user_api_4"}
        )
        anonymous = await client.post("/credits/deduct", json={"action": "flux-dev"})

        assert negative.status_code == 400
        assert negative.json()["error"]["code"] == "VALIDATION_ERROR"
        assert anonymous.status_code == 400
        assert "X-Account-Id" in anonymous.json()["error"]["reason"]

    @pytest.mark.asyncio
    async def test_body_account_cannot_override_caller(self, client: AsyncClient):
        """A signed-in caller cannot spend or inspect another account's credits"""
        headers = {"X-Account-Id": "user_api_11"}

        other = await client.post("/credits/deduct", json={"accountId": "victim", "cost": "1"}, headers=headers)
        peek = await client.post("/credits/check", json={"accountId": "victim"}, headers=headers)
        own = await client.post("/credits/deduct", json={"accountId": "user_api_11", "cost": "1"}, headers=headers)

        assert other.status_code == 401
        assert other.json()["error"]["code"] == "UNAUTHORIZED"
        assert peek.status_code == 401
        assert own.status_code == 200
        assert Decimal(own.json()["newBalance"]) == Decimal("49")

    @pytest.mark.asyncio
    async def test_reused_idempotency_key_from_another_account_returns_409(self, client: AsyncClient):
        await client.post(
            "/credits/deduct",
            json={"cost": "5", "idempotencyKey": "shared_key"},
            headers={"X-Account-Id": "user_api_12"},
        )

        response = await client.post(
            "/credits/deduct",
            json={"cost": "1", "idempotencyKey": "shared_key"},
            headers={"X-Account-Id": "user_api_13"},
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "IDEMPOTENCY_KEY_CONFLICT"
        assert "newBalance" not in response.json()

    @pytest.mark.asyncio
    async def test_grant_requires_internal_token(self, client: AsyncClient, internal_headers):
        """POST /credits/grant is an operator endpoint"""
        payload = {"accountId": "user_api_5", "amount": "25", "reason": "Support credit"}

        unauthorized = await client.post("/credits/grant", json=payload)
        wrong_token = await client.post("/credits/grant", json=payload, headers={"X-Internal-Token": "nope"})
        granted = await client.post("/credits/grant", json=payload, headers=internal_headers)

        assert unauthorized.status_code == 401
        assert unauthorized.json()["error"]["code"] == "UNAUTHORIZED"
        assert wrong_token.status_code == 401
        assert granted.status_code == 200
        assert Decimal(granted.json()["newBalance"]) == Decimal("75")

    @pytest.mark.asyncio
    async def test_grant_rejects_generation_spend_kind(self, client: AsyncClient, internal_headers):
        response = await client.post(
            "/credits/grant",
            json={"accountId": "user_api_6", "amount": "5", "kind": "GENERATION_SPEND"},
            headers=internal_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_purchase_bonus_is_granted_once_per_order(self, client: AsyncClient, internal_headers):
        """POST /credits/purchase-bonus grants bonus per item, keyed by order"""
        payload = {"accountId": "user_api_7", "orderId": "1001", "itemCount": 2}

        first = await client.post("/credits/purchase-bonus", json=payload, headers=internal_headers)
        replay = await client.post("/credits/purchase-bonus", json=payload, headers=internal_headers)

        assert first.status_code == 200
        assert Decimal(first.json()["creditsGranted"]) == Decimal("20")
        assert Decimal(first.json()["newBalance"]) == Decimal("70")
        assert replay.json()["transactionId"] == first.json()["transactionId"]

        stats = await client.get("/credits/user_api_7")
        assert Decimal(stats.json()["balance"]) == Decimal("70")

    @pytest.mark.asyncio
    async def test_credit_stats(self, client: AsyncClient):
        """GET /credits/{accountId} returns the overview in camelCase"""
        await client.post("/credits/deduct", json={"action": "flux-dev"}, headers={"X-Account-Id": "user_api_8"})

        response = await client.get("/credits/user_api_8")

        assert response.status_code == 200
        data = response.json()
        assert data["accountId"] == "user_api_8"
        assert Decimal(data["balance"]) == Decimal("49")
        assert Decimal(data["monthlyAllocation"]) == Decimal("50")
        assert Decimal(data["monthlyUsed"]) == Decimal("1")
        assert Decimal(data["welcomeCreditsRemaining"]) == Decimal("50")
        assert Decimal(data["lifetimeGranted"]) == Decimal("50")
        assert Decimal(data["lifetimeSpent"]) == Decimal("1")
        assert datetime.fromisoformat(data["lastMonthlyResetAt"]) == datetime(2026, 10, 15, 12, 0, 0)
        assert [t["kind"] for t in data["recentTransactions"]] == ["GENERATION_SPEND", "MONTHLY_RESET"]

    @pytest.mark.asyncio
    async def test_list_transactions_pagination(self, client: AsyncClient, clock):
        """GET /credits/{accountId}/transactions pages newest first"""
        for i in range(4):
            clock.advance(minutes=1)
            await client.post("/credits/deduct", json={"cost": str(i + 1)}, headers={"X-Account-Id": "user_api_9"})

        response = await client.get("/credits/user_api_9/transactions", params={"limit": 2, "offset": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["limit"] == 2
        assert data["offset"] == 1
        assert [Decimal(t["amount"]) for t in data["transactions"]] == [Decimal("-3"), Decimal("-2")]

    @pytest.mark.asyncio
    async def test_list_transactions_rejects_large_limit(self, client: AsyncClient):
        response = await client.get("/credits/user_api_10/transactions", params={"limit": 500})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestHealthAPI:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
