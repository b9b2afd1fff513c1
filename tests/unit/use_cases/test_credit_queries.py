"""Unit tests for read-side credit use cases

CheckBalance, GetCreditStats and ListTransactions.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from storefront_billing.app.use_cases.credits import (
    CheckBalance,
    CheckBalanceCommandDTO,
    GetCreditStats,
    ListTransactions,
)
from storefront_billing.domain.account_credit import AccountCredit
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind


def make_account(balance: str, welcome_used: str = "0") -> AccountCredit:
    return AccountCredit(
        id=1,
        account_id="acct_1",
        balance=Decimal(balance),
        monthly_allocation=Decimal("50"),
        monthly_used=Decimal("3"),
        last_monthly_reset_at=datetime(2026, 10, 1),
        welcome_allocation=Decimal("50"),
        welcome_used=Decimal(welcome_used),
        lifetime_granted=Decimal("50"),
        lifetime_spent=Decimal("3"),
    )


def make_transaction(transaction_id: int, kind: CreditTransactionKind, amount: str, balance_after: str):
    return CreditTransaction(
        id=transaction_id,
        account_id="acct_1",
        kind=kind,
        amount=Decimal(amount),
        balance_after=Decimal(balance_after),
        reason="test",
        metadata_json='{"action": "flux-dev"}' if kind == CreditTransactionKind.GENERATION_SPEND else None,
        created_at=datetime(2026, 10, 2, transaction_id),
    )


@pytest.fixture
def mock_accounts():
    accounts = MagicMock()
    accounts.load = AsyncMock(return_value=make_account("0.5"))
    return accounts


@pytest.mark.asyncio
class TestCheckBalance:
    async def test_insufficient_for_priced_action(self, mock_accounts, billing_settings):
        result = await CheckBalance(mock_accounts, billing_settings).execute(
            CheckBalanceCommandDTO(account_id="acct_1", action="nano-banana-pro")
        )

        assert result.is_ok()
        assert result.value.sufficient is False
        assert result.value.balance == Decimal("0.5")
        assert result.value.cost == Decimal("2")

    async def test_sufficient_for_cheap_action(self, mock_accounts, billing_settings):
        result = await CheckBalance(mock_accounts, billing_settings).execute(
            CheckBalanceCommandDTO(account_id="acct_1", action="nano-banana")
        )

        assert result.value.sufficient is True
        assert result.value.cost == Decimal("0.5")

    async def test_explicit_cost_overrides_action(self, mock_accounts, billing_settings):
        result = await CheckBalance(mock_accounts, billing_settings).execute(
            CheckBalanceCommandDTO(account_id="acct_1", action="nano-banana", cost=Decimal("0.25"))
        )

        assert result.value.cost == Decimal("0.25")

    async def test_load_failure(self, mock_accounts, billing_settings):
        mock_accounts.load = AsyncMock(side_effect=RuntimeError("db down"))

        result = await CheckBalance(mock_accounts, billing_settings).execute(
            CheckBalanceCommandDTO(account_id="acct_1")
        )

        assert result.is_err()
        assert result.error.code == "CHECK_BALANCE_FAILED"


@pytest.mark.asyncio
class TestGetCreditStats:
    async def test_stats_include_welcome_remaining_and_recent_transactions(self, mock_accounts):
        mock_accounts.load = AsyncMock(return_value=make_account("47", welcome_used="5"))
        transaction_repo = MagicMock()
        transaction_repo.get_by_account_id = AsyncMock(
            return_value=(
                [
                    make_transaction(2, CreditTransactionKind.GENERATION_SPEND, "-3", "47"),
                    make_transaction(1, CreditTransactionKind.MONTHLY_RESET, "50", "50"),
                ],
                2,
            )
        )

        result = await GetCreditStats(mock_accounts, transaction_repo).execute("acct_1")

        assert result.is_ok()
        stats = result.value
        assert stats.balance == Decimal("47")
        assert stats.welcome_credits_remaining == Decimal("45")
        assert stats.lifetime_spent == Decimal("3")
        assert [t.id for t in stats.recent_transactions] == [2, 1]
        assert stats.recent_transactions[0].kind == "GENERATION_SPEND"
        assert stats.recent_transactions[0].metadata == {"action": "flux-dev"}
        transaction_repo.get_by_account_id.assert_called_once_with("acct_1", limit=10, offset=0)


@pytest.mark.asyncio
class TestListTransactions:
    async def test_paginated_listing(self):
        transaction_repo = MagicMock()
        transaction_repo.get_by_account_id = AsyncMock(
            return_value=([make_transaction(3, CreditTransactionKind.GENERATION_SPEND, "-1", "49")], 7)
        )

        result = await ListTransactions(transaction_repo).execute(
            "acct_1", limit=1, offset=2, kind=CreditTransactionKind.GENERATION_SPEND
        )

        assert result.is_ok()
        assert result.value.total == 7
        assert result.value.limit == 1
        assert result.value.offset == 2
        assert result.value.transactions[0].amount == Decimal("-1")
        transaction_repo.get_by_account_id.assert_called_once_with(
            account_id="acct_1", limit=1, offset=2, kind=CreditTransactionKind.GENERATION_SPEND
        )
