from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from storefront_billing.app.billing_settings import BillingSettings
from tests.fakes import FakeClock


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    """Clock pinned to mid-October 2026 (UTC)"""
    return FakeClock(datetime(2026, 10, 15, 12, 0, 0))


@pytest.fixture
def billing_settings():
    """Default billing settings"""
    return BillingSettings(
        monthly_credits=Decimal("50"),
        welcome_credits=Decimal("50"),
        purchase_bonus_per_item=Decimal("10"),
        guest_daily_limit=3,
        guest_window_hours=24,
        currency="USD",
        payment_timeout_seconds=1.0,
    )
