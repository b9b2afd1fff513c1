from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import storefront_billing.domain  # noqa: F401  registers the tables
from config import ApplicationConfig
from storefront_billing.adapter.repositories.account_credit_repository import SqlAlchemyAccountCreditRepository
from storefront_billing.adapter.repositories.credit_transaction_repository import (
    SqlAlchemyCreditTransactionRepository,
)
from storefront_billing.adapter.repositories.discount_code_repository import SqlAlchemyDiscountCodeRepository
from storefront_billing.adapter.repositories.discount_redemption_repository import (
    SqlAlchemyDiscountRedemptionRepository,
)
from storefront_billing.adapter.repositories.guest_quota_repository import SqlAlchemyGuestQuotaRepository
from storefront_billing.adapter.services.payment_provider import SandboxPaymentProvider
from storefront_billing.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from storefront_billing.app.use_cases.credits import (
    DeductCredits,
    GetOrInitAccount,
    GrantCredits,
    ReconcileLedger,
)
from storefront_billing.app.use_cases.discounts import CreateDiscountCode, RedeemDiscount, ValidateDiscount
from storefront_billing.app.use_cases.guest_quota import ConsumeGuestQuota, GetGuestQuota
from storefront_billing.depends import get_session
from tests.fakes import FlakyPaymentProvider


class IntegrationConfig(ApplicationConfig):
    INTERNAL_API_TOKEN = "test-token"
    AUTH_DISABLED = False
    ENABLE_LOGGING_MIDDLEWARE = False
    CORS_ORIGINS = []
    PAYMENT_PROVIDER_URL = ""
    PAYMENT_PROVIDER_TIMEOUT_SECONDS = 1
    LEDGER_TIMEZONE = "UTC"
    MONTHLY_CREDITS = 50
    WELCOME_CREDITS = 50
    PURCHASE_BONUS_PER_ITEM = 10
    GUEST_DAILY_LIMIT = 3
    GUEST_WINDOW_HOURS = 24


@pytest_asyncio.fixture(scope="function")
async def db_uri(tmp_path):
    """File-backed SQLite database, one per test"""
    return f"sqlite+aiosqlite:///{tmp_path / 'billing_test.db'}"


@pytest_asyncio.fixture(scope="function")
async def engine(db_uri):
    """Create test database engine with all tables"""
    engine = create_async_engine(db_uri, echo=False, future=True, connect_args={"timeout": 30})

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    """Session factory for tests that need several independent sessions"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def payment_provider():
    return FlakyPaymentProvider(SandboxPaymentProvider())


@pytest_asyncio.fixture
async def app(session_factory, clock, payment_provider):
    """Application wired to the test database, clock and sandbox provider"""
    from storefront_billing.api.app import create_app

    app = create_app(IntegrationConfig)
    app.state.clock = clock
    app.state.payment_provider = payment_provider

    # Each request gets its own session, as in production
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest_asyncio.fixture
async def client(app):
    """Create test client with database session override"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def internal_headers():
    return {"X-Internal-Token": "test-token"}


@pytest.fixture
def credit_use_cases(billing_settings, clock):
    """Builds the credit use cases over a given session"""

    def build(session):
        uow = SqlAlchemyUnitOfWork(session)
        account_repo = SqlAlchemyAccountCreditRepository(session)
        transaction_repo = SqlAlchemyCreditTransactionRepository(session)
        accounts = GetOrInitAccount(uow, account_repo, transaction_repo, billing_settings, clock)
        return SimpleNamespace(
            account_repo=account_repo,
            transaction_repo=transaction_repo,
            accounts=accounts,
            deduct=DeductCredits(uow, account_repo, transaction_repo, accounts, billing_settings, clock),
            grant=GrantCredits(uow, account_repo, transaction_repo, accounts, clock),
            reconcile=ReconcileLedger(account_repo, transaction_repo, clock),
        )

    return build


@pytest.fixture
def discount_use_cases(clock):
    """Builds the discount use cases over a given session"""

    def build(session):
        uow = SqlAlchemyUnitOfWork(session)
        code_repo = SqlAlchemyDiscountCodeRepository(session)
        redemption_repo = SqlAlchemyDiscountRedemptionRepository(session)
        return SimpleNamespace(
            code_repo=code_repo,
            redemption_repo=redemption_repo,
            create=CreateDiscountCode(uow, code_repo, clock),
            validate=ValidateDiscount(code_repo, redemption_repo, clock),
            redeem=RedeemDiscount(uow, code_repo, redemption_repo, clock),
        )

    return build


@pytest.fixture
def guest_quota_use_cases(billing_settings, clock):
    """Builds the guest quota use cases over a given session"""

    def build(session):
        quota_repo = SqlAlchemyGuestQuotaRepository(session)
        return SimpleNamespace(
            quota_repo=quota_repo,
            consume=ConsumeGuestQuota(SqlAlchemyUnitOfWork(session), quota_repo, billing_settings, clock),
            peek=GetGuestQuota(quota_repo, billing_settings, clock),
        )

    return build


@pytest.fixture
def integration_config():
    return IntegrationConfig
