"""Unit tests for GrantCredits and GrantPurchaseBonus use cases"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from pydantic import ValidationError

from storefront_billing.app.use_cases.credits import (
    GrantCommandDTO,
    GrantCredits,
    GrantPurchaseBonus,
    PurchaseBonusCommandDTO,
)
from storefront_billing.domain.account_credit import AccountCredit
from storefront_billing.domain.credit_transaction import CreditTransaction, CreditTransactionKind


def make_account(balance: str) -> AccountCredit:
    return AccountCredit(
        id=1,
        account_id="acct_1",
        balance=Decimal(balance),
        monthly_allocation=Decimal("50"),
        monthly_used=Decimal("0"),
        last_monthly_reset_at=datetime(2026, 10, 1),
        welcome_allocation=Decimal("50"),
        welcome_used=Decimal("0"),
        lifetime_granted=Decimal("50"),
        lifetime_spent=Decimal("0"),
    )


def assign_id(transaction_id: int):
    def create(transaction: CreditTransaction) -> CreditTransaction:
        transaction.id = transaction_id
        return transaction
    return create


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    repo = MagicMock()
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_accounts():
    accounts = MagicMock()
    accounts.load = AsyncMock(return_value=make_account("50"))
    return accounts


@pytest.fixture
def grant_use_case(mock_uow, mock_account_repo, mock_transaction_repo, mock_accounts, clock):
    return GrantCredits(mock_uow, mock_account_repo, mock_transaction_repo, mock_accounts, clock)


@pytest.mark.asyncio
class TestGrantCredits:
    async def test_grant_increments_balance(
        self, grant_use_case, mock_account_repo, mock_transaction_repo, mock_uow, clock
    ):
        mock_account_repo.increment_balance = AsyncMock(return_value=True)
        mock_account_repo.get_by_account_id = AsyncMock(return_value=make_account("75"))
        mock_transaction_repo.create = AsyncMock(side_effect=assign_id(11))

        result = await grant_use_case.execute(
            GrantCommandDTO(account_id="acct_1", amount=Decimal("25"), reason="Support credit")
        )

        assert result.is_ok()
        assert result.value.new_balance == Decimal("75")
        assert result.value.transaction_id == 11
        mock_account_repo.increment_balance.assert_called_once_with("acct_1", Decimal("25"), clock.now())

        transaction = mock_transaction_repo.create.call_args[0][0]
        assert transaction.kind == CreditTransactionKind.MANUAL_GRANT
        assert transaction.amount == Decimal("25")
        assert transaction.balance_after == Decimal("75")
        assert transaction.reason == "Support credit"
        mock_uow.commit.assert_called_once()

    async def test_missing_account_row(self, grant_use_case, mock_account_repo, mock_uow):
        mock_account_repo.increment_balance = AsyncMock(return_value=False)

        result = await grant_use_case.execute(GrantCommandDTO(account_id="acct_1", amount=Decimal("5")))

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
        mock_uow.rollback.assert_called_once()

    async def test_replayed_key_returns_original_grant(
        self, grant_use_case, mock_account_repo, mock_transaction_repo
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(
            return_value=CreditTransaction(
                id=3,
                account_id="acct_1",
                kind=CreditTransactionKind.MANUAL_GRANT,
                amount=Decimal("5"),
                balance_after=Decimal("55"),
                reason="Manual grant",
                idempotency_key="grant_1",
            )
        )
        mock_account_repo.increment_balance = AsyncMock()

        result = await grant_use_case.execute(
            GrantCommandDTO(account_id="acct_1", amount=Decimal("5"), idempotency_key="grant_1")
        )

        assert result.is_ok()
        assert result.value.transaction_id == 3
        assert result.value.new_balance == Decimal("55")
        mock_account_repo.increment_balance.assert_not_called()

    async def test_key_reused_for_another_account_is_rejected(
        self, grant_use_case, mock_account_repo, mock_transaction_repo
    ):
        mock_transaction_repo.get_by_idempotency_key = AsyncMock(
            return_value=CreditTransaction(
                id=3,
                account_id="acct_1",
                kind=CreditTransactionKind.MANUAL_GRANT,
                amount=Decimal("5"),
                balance_after=Decimal("55"),
                reason="Manual grant",
                idempotency_key="grant_1",
            )
        )
        mock_account_repo.increment_balance = AsyncMock()

        result = await grant_use_case.execute(
            GrantCommandDTO(account_id="acct_2", amount=Decimal("5"), idempotency_key="grant_1")
        )

        assert result.is_err()
        assert result.error.code == "IDEMPOTENCY_KEY_CONFLICT"
        mock_account_repo.increment_balance.assert_not_called()

    def test_spend_kind_cannot_be_granted(self):
        with pytest.raises(ValidationError):
            GrantCommandDTO(
                account_id="acct_1",
                amount=Decimal("5"),
                kind=CreditTransactionKind.GENERATION_SPEND,
            )

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            GrantCommandDTO(account_id="acct_1", amount=Decimal("-5"))

    def test_amount_finer_than_ledger_precision_rejected(self):
        with pytest.raises(ValidationError):
            GrantCommandDTO(account_id="acct_1", amount=Decimal("0.0000001"))

        assert GrantCommandDTO(account_id="acct_1", amount=Decimal("0.000001")).amount == Decimal("0.000001")


@pytest.mark.asyncio
class TestGrantPurchaseBonus:
    async def test_bonus_is_per_item_and_keyed_by_order(
        self, grant_use_case, mock_account_repo, mock_transaction_repo, billing_settings
    ):
        mock_account_repo.increment_balance = AsyncMock(return_value=True)
        mock_account_repo.get_by_account_id = AsyncMock(return_value=make_account("80"))
        mock_transaction_repo.create = AsyncMock(side_effect=assign_id(12))

        use_case = GrantPurchaseBonus(grant_use_case, billing_settings)
        result = await use_case.execute(
            PurchaseBonusCommandDTO(account_id="acct_1", order_id="42", item_count=3)
        )

        assert result.is_ok()
        assert result.value.credits_granted == Decimal("30")
        assert result.value.new_balance == Decimal("80")

        transaction = mock_transaction_repo.create.call_args[0][0]
        assert transaction.kind == CreditTransactionKind.PURCHASE_BONUS
        assert transaction.idempotency_key == "purchase_bonus:42"
        assert transaction.reason == "Purchase bonus for order 42"
        assert transaction.metadata_dict() == {"item_count": 3, "order_id": "42"}

    async def test_grant_error_is_passed_through(self, grant_use_case, mock_account_repo, billing_settings):
        mock_account_repo.increment_balance = AsyncMock(return_value=False)

        result = await GrantPurchaseBonus(grant_use_case, billing_settings).execute(
            PurchaseBonusCommandDTO(account_id="acct_1", order_id="42", item_count=1)
        )

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
