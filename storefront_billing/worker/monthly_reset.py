"""Monthly Credit Reset Background Worker

Applies the monthly reset to accounts that have not been touched since the
current month began. Reads perform the same reset lazily; this sweep only
keeps idle accounts and reporting in step with the calendar.
"""

import asyncio
import logging
import time
from typing import List, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from storefront_billing.adapter.repositories.account_credit_repository import SqlAlchemyAccountCreditRepository
from storefront_billing.adapter.repositories.credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from storefront_billing.adapter.services.clock import SystemClock
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.app.billing_settings import BillingSettings
from storefront_billing.app.services.clock import Clock
from storefront_billing.app.use_cases.credits import GetOrInitAccount, MonthlyResetSweepResultDTO

logger = logging.getLogger(__name__)


class MonthlyResetWorker:
    """
    Background worker for the monthly credit reset

    Features:
    - Finds accounts whose last reset predates the start of the current month
    - Resets them through the same use case the request path uses
    - Idempotent: safe to re-run, concurrent requests are not double-reset
    - Can run once or continuously

    Usage:
        worker = MonthlyResetWorker()
        result = await worker.run_once()

        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        config=ApplicationConfig,
        clock: Optional[Clock] = None,
        settings: Optional[BillingSettings] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to config.DB_URI)
            config: Configuration object (defaults to ApplicationConfig)
            clock: Time source (defaults to the system clock)
            settings: Billing settings (defaults to settings built from config)
        """
        self.config = config
        self.db_uri = db_uri or config.DB_URI
        self.clock = clock or SystemClock(config.LEDGER_TIMEZONE)
        self.settings = settings or BillingSettings.from_config(config)
        self.batch_size = getattr(config, "MONTHLY_RESET_BATCH_SIZE", 500)

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("MonthlyResetWorker initialized")

    async def run_once(self) -> MonthlyResetSweepResultDTO:
        """
        Reset every account still carrying a previous month's allocation

        Returns:
            MonthlyResetSweepResultDTO with sweep counters
        """
        start_time = time.time()
        cutoff = self.clock.start_of_month(self.clock.now())

        async with self.async_session_factory() as session:
            account_repo = SqlAlchemyAccountCreditRepository(session)
            account_ids = await account_repo.get_account_ids_reset_before(cutoff)

        logger.info(f"Monthly reset sweep: {len(account_ids)} accounts due (cutoff {cutoff.isoformat()})")

        reset_count = 0
        failures = 0

        # One session per batch
        for offset in range(0, len(account_ids), self.batch_size):
            batch = account_ids[offset:offset + self.batch_size]
            batch_reset, batch_failures = await self._reset_batch(batch)
            reset_count += batch_reset
            failures += batch_failures

        execution_time_ms = int((time.time() - start_time) * 1000)

        if failures:
            logger.error(f"Monthly reset sweep finished with {failures} failures")

        return MonthlyResetSweepResultDTO(
            accounts_due=len(account_ids),
            accounts_reset=reset_count,
            failures=failures,
            execution_time_ms=execution_time_ms,
        )

    async def _reset_batch(self, account_ids: List[str]):
        reset_count = 0
        failures = 0

        async with self.async_session_factory() as session:
            use_case = GetOrInitAccount(
                uow=SqlAlchemyUnitOfWork(session),
                account_repo=SqlAlchemyAccountCreditRepository(session),
                transaction_repo=SqlAlchemyCreditTransactionRepository(session),
                settings=self.settings,
                clock=self.clock,
            )

            for account_id in account_ids:
                try:
                    account = await use_case.load(account_id)
                    if self.clock.same_month(account.last_monthly_reset_at, self.clock.now()):
                        reset_count += 1
                except Exception as e:
                    await session.rollback()
                    failures += 1
                    logger.error(f"Monthly reset failed for account {account_id}: {e}")

        return reset_count, failures

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run the sweep continuously at specified interval

        Args:
            interval_seconds: Seconds between sweeps (default: 1 hour)
        """
        logger.info(f"Starting continuous monthly reset sweep with {interval_seconds}s interval")

        while True:
            try:
                if getattr(self.config, "MONTHLY_RESET_ENABLED", True):
                    result = await self.run_once()
                    logger.info(
                        f"Monthly reset cycle complete. "
                        f"Reset {result.accounts_reset}/{result.accounts_due} accounts "
                        f"in {result.execution_time_ms}ms"
                    )
                else:
                    logger.info("Monthly reset sweep is disabled, skipping")
            except Exception as e:
                logger.error(f"Monthly reset cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("MonthlyResetWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m storefront_billing.worker.monthly_reset --once
        python -m storefront_billing.worker.monthly_reset --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Monthly Credit Reset Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.MONTHLY_RESET_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: MONTHLY_RESET_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = MonthlyResetWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Monthly reset complete:")
            print(f"  Accounts due: {result.accounts_due}")
            print(f"  Accounts reset: {result.accounts_reset}")
            print(f"  Failures: {result.failures}")
            print(f"  Execution time: {result.execution_time_ms}ms")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
