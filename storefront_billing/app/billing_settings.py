"""Billing settings

Prices, allocations and limits, built once from ApplicationConfig at
startup and handed to the use cases. Frozen so a request can never change
them for the rest of the process.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PRICE_TABLE = {
    "flux-dev": Decimal("1"),
    "lora-normal": Decimal("1"),
    "lora-context": Decimal("1"),
    "nano-banana": Decimal("0.5"),
    "nano-banana-pro": Decimal("2"),
    "gemini-flash": Decimal("1"),
}


class BillingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    monthly_credits: Decimal = Field(default=Decimal("50"), ge=0)
    welcome_credits: Decimal = Field(default=Decimal("50"), ge=0)
    purchase_bonus_per_item: Decimal = Field(default=Decimal("10"), ge=0)
    price_table: dict[str, Decimal] = Field(default_factory=lambda: dict(DEFAULT_PRICE_TABLE))
    default_credit_cost: Decimal = Field(default=Decimal("1"), gt=0)
    guest_daily_limit: int = Field(default=3, ge=1)
    guest_window_hours: int = Field(default=24, ge=1)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    payment_timeout_seconds: float = Field(default=15.0, gt=0)

    @field_validator("price_table")
    @classmethod
    def validate_price_table(cls, v: dict[str, Decimal]) -> dict[str, Decimal]:
        for action, cost in v.items():
            if cost <= 0:
                raise ValueError(f"Price for action '{action}' must be positive")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def guest_window(self) -> timedelta:
        return timedelta(hours=self.guest_window_hours)

    def cost_for(self, action: Optional[str]) -> Decimal:
        """Credit cost of one generation with the given model/action"""
        if action is None:
            return self.default_credit_cost
        return self.price_table.get(action, self.default_credit_cost)

    @classmethod
    def from_config(cls, config: Any) -> "BillingSettings":
        return cls(
            monthly_credits=Decimal(str(config.MONTHLY_CREDITS)),
            welcome_credits=Decimal(str(config.WELCOME_CREDITS)),
            purchase_bonus_per_item=Decimal(str(config.PURCHASE_BONUS_PER_ITEM)),
            price_table={k: Decimal(str(v)) for k, v in config.CREDIT_PRICE_TABLE.items()},
            default_credit_cost=Decimal(str(config.DEFAULT_CREDIT_COST)),
            guest_daily_limit=int(config.GUEST_DAILY_LIMIT),
            guest_window_hours=int(config.GUEST_WINDOW_HOURS),
            currency=config.CURRENCY,
            payment_timeout_seconds=float(config.PAYMENT_PROVIDER_TIMEOUT_SECONDS),
        )
