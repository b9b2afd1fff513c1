"""
Integration tests for the credit ledger against a real database

Each test gets its own SQLite file, so concurrent tests use independent
sessions (and connections) exactly like concurrent requests do.
"""

import asyncio
import random
from datetime import datetime
from decimal import Decimal

import pytest

from storefront_billing.app.use_cases.credits import DeductCommandDTO, GrantCommandDTO
from storefront_billing.domain.credit_transaction import CreditTransactionKind


async def assert_ledger_balanced(ledger, account_id: str) -> Decimal:
    account = await ledger.account_repo.get_by_account_id(account_id)
    replayed = await ledger.transaction_repo.get_sum_by_account_id(account_id)
    assert account.balance == replayed
    assert account.balance >= 0
    return account.balance


@pytest.mark.asyncio
class TestCreditLedgerLifecycle:
    async def test_spend_grant_and_monthly_reset(self, db_session, credit_use_cases, clock):
        """Three generations, a welcome grant, then the first access of next month"""
        ledger = credit_use_cases(db_session)

        created = await ledger.accounts.execute("user_1")
        assert created.value.balance == Decimal("50")
        assert created.value.lifetime_granted == Decimal("50")

        for i in range(3):
            spent = await ledger.deduct.execute(
                DeductCommandDTO(account_id="user_1", action="flux-dev", idempotency_key=f"gen_{i}")
            )
            assert spent.is_ok()
        assert spent.value.new_balance == Decimal("47")

        granted = await ledger.grant.execute(
            GrantCommandDTO(
                account_id="user_1",
                amount=Decimal("50"),
                kind=CreditTransactionKind.WELCOME_GRANT,
                reason="Welcome bonus",
            )
        )
        assert granted.value.new_balance == Decimal("97")

        account = await ledger.account_repo.get_by_account_id("user_1")
        assert account.lifetime_spent == Decimal("3")
        assert account.monthly_used == Decimal("3")

        spends, total_spends = await ledger.transaction_repo.get_by_account_id(
            "user_1", kind=CreditTransactionKind.GENERATION_SPEND
        )
        assert total_spends == 3
        assert all(t.amount == Decimal("-1") for t in spends)

        # First access in November
        clock.set(datetime(2026, 11, 2, 9, 0, 0))
        reset = await ledger.accounts.execute("user_1")

        assert reset.value.balance == Decimal("50")
        assert reset.value.monthly_used == Decimal("0")
        assert reset.value.lifetime_granted == Decimal("150")
        assert reset.value.last_monthly_reset_at == datetime(2026, 11, 2, 9, 0, 0)

        resets, _ = await ledger.transaction_repo.get_by_account_id(
            "user_1", kind=CreditTransactionKind.MONTHLY_RESET
        )
        latest = resets[0]
        assert latest.amount == Decimal("-47")
        assert Decimal(latest.metadata_dict()["forfeited_balance"]) == Decimal("97")
        assert latest.idempotency_key == "monthly_reset:user_1:2026-11"

        assert await assert_ledger_balanced(ledger, "user_1") == Decimal("50")

    async def test_reset_happens_once_per_month(self, db_session, credit_use_cases, clock):
        ledger = credit_use_cases(db_session)
        await ledger.accounts.execute("user_1")

        clock.set(datetime(2026, 11, 1, 0, 0, 1))
        await ledger.accounts.execute("user_1")
        await ledger.deduct.execute(DeductCommandDTO(account_id="user_1", cost=Decimal("5")))

        clock.set(datetime(2026, 11, 30, 23, 59, 59))
        account = await ledger.accounts.execute("user_1")

        assert account.value.balance == Decimal("45")
        _, total_resets = await ledger.transaction_repo.get_by_account_id(
            "user_1", kind=CreditTransactionKind.MONTHLY_RESET
        )
        assert total_resets == 2  # initial grant + November

    async def test_replayed_deduct_charges_once(self, db_session, credit_use_cases):
        ledger = credit_use_cases(db_session)
        command = DeductCommandDTO(account_id="user_1", action="nano-banana-pro", idempotency_key="gen_abc")

        first = await ledger.deduct.execute(command)
        second = await ledger.deduct.execute(command)

        assert first.value.new_balance == Decimal("48")
        assert second.value == first.value
        _, total = await ledger.transaction_repo.get_by_account_id(
            "user_1", kind=CreditTransactionKind.GENERATION_SPEND
        )
        assert total == 1

    async def test_idempotency_key_is_scoped_to_its_account(self, db_session, credit_use_cases):
        ledger = credit_use_cases(db_session)
        await ledger.deduct.execute(DeductCommandDTO(account_id="alice", cost=Decimal("5"), idempotency_key="gen_1"))

        result = await ledger.deduct.execute(
            DeductCommandDTO(account_id="bob", cost=Decimal("1"), idempotency_key="gen_1")
        )

        assert result.is_err()
        assert result.error.code == "IDEMPOTENCY_KEY_CONFLICT"
        assert await assert_ledger_balanced(ledger, "alice") == Decimal("45")
        assert await ledger.account_repo.get_by_account_id("bob") is None

    async def test_insufficient_balance_changes_nothing(self, db_session, credit_use_cases):
        ledger = credit_use_cases(db_session)
        await ledger.deduct.execute(DeductCommandDTO(account_id="user_1", cost=Decimal("49.5")))

        result = await ledger.deduct.execute(DeductCommandDTO(account_id="user_1", action="flux-dev"))

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_BALANCE"
        assert result.error.message.startswith("Insufficient credits. Required: 1, Available: 0.5")
        assert await assert_ledger_balanced(ledger, "user_1") == Decimal("0.5")

    async def test_random_operations_keep_log_and_balance_equal(self, db_session, credit_use_cases, clock):
        """Replaying the log always gives the stored balance, across month boundaries"""
        rng = random.Random(20261015)
        ledger = credit_use_cases(db_session)

        for _ in range(60):
            operation = rng.choice(["deduct", "deduct", "deduct", "grant", "advance"])

            if operation == "deduct":
                cost = rng.choice([Decimal("0.5"), Decimal("1"), Decimal("2"), Decimal("7.5")])
                result = await ledger.deduct.execute(DeductCommandDTO(account_id="user_rng", cost=cost))
                if result.is_err():
                    assert result.error.code == "INSUFFICIENT_BALANCE"
            elif operation == "grant":
                amount = rng.choice([Decimal("1"), Decimal("5"), Decimal("10")])
                result = await ledger.grant.execute(GrantCommandDTO(account_id="user_rng", amount=amount))
                assert result.is_ok()
            else:
                clock.advance(days=rng.randint(1, 12))
                await ledger.accounts.execute("user_rng")

            await assert_ledger_balanced(ledger, "user_rng")

        reconciliation = await ledger.reconcile.execute()
        assert reconciliation.value.discrepancies_found == 0


@pytest.mark.asyncio
class TestCreditLedgerConcurrency:
    async def test_concurrent_deducts_never_overdraw(self, session_factory, credit_use_cases):
        """20 concurrent generations of cost 1 against a balance of 10"""
        async with session_factory() as session:
            ledger = credit_use_cases(session)
            await ledger.deduct.execute(DeductCommandDTO(account_id="user_race", cost=Decimal("40")))

        async def deduct_once(i: int):
            async with session_factory() as session:
                return await credit_use_cases(session).deduct.execute(
                    DeductCommandDTO(account_id="user_race", cost=Decimal("1"), idempotency_key=f"race_{i}")
                )

        results = await asyncio.gather(*(deduct_once(i) for i in range(20)))

        succeeded = [r for r in results if r.is_ok()]
        failed = [r for r in results if r.is_err()]
        assert len(succeeded) == 10
        assert {r.error.code for r in failed} == {"INSUFFICIENT_BALANCE"}

        async with session_factory() as session:
            ledger = credit_use_cases(session)
            assert await assert_ledger_balanced(ledger, "user_race") == Decimal("0")
            account = await ledger.account_repo.get_by_account_id("user_race")
            assert account.lifetime_spent == Decimal("50")

    async def test_concurrent_first_access_creates_one_account(self, session_factory, credit_use_cases):
        async def load():
            async with session_factory() as session:
                return await credit_use_cases(session).accounts.execute("user_new")

        results = await asyncio.gather(*(load() for _ in range(5)))

        assert all(r.is_ok() for r in results)
        assert {r.value.balance for r in results} == {Decimal("50")}

        async with session_factory() as session:
            ledger = credit_use_cases(session)
            _, total = await ledger.transaction_repo.get_by_account_id("user_new")
            assert total == 1
            assert await assert_ledger_balanced(ledger, "user_new") == Decimal("50")

    async def test_concurrent_month_rollover_resets_once(self, session_factory, credit_use_cases, clock):
        async with session_factory() as session:
            ledger = credit_use_cases(session)
            await ledger.deduct.execute(DeductCommandDTO(account_id="user_1", cost=Decimal("20")))

        clock.set(datetime(2026, 11, 3, 8, 0, 0))

        async def load():
            async with session_factory() as session:
                return await credit_use_cases(session).accounts.execute("user_1")

        results = await asyncio.gather(*(load() for _ in range(4)))

        assert all(r.is_ok() for r in results)
        assert {r.value.balance for r in results} == {Decimal("50")}

        async with session_factory() as session:
            ledger = credit_use_cases(session)
            _, total_resets = await ledger.transaction_repo.get_by_account_id(
                "user_1", kind=CreditTransactionKind.MONTHLY_RESET
            )
            assert total_resets == 2
            account = await ledger.account_repo.get_by_account_id("user_1")
            assert account.lifetime_granted == Decimal("100")
            await assert_ledger_balanced(ledger, "user_1")
