"""Guest Quota Domain Entity

Rolling-window generation counter for unauthenticated visitors, keyed by an
opaque session id. Independent of the authenticated credit ledger.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, String
from storefront_billing.domain.base import BaseModel, BigIntegerId


class GuestQuota(BaseModel, table=True):
    """
    Guest Quota - Generations used by a guest session in the current window

    Domain Rules:
    - One record per session_id
    - The window starts at window_start_at and lasts a configured number of hours
    - count never exceeds the configured limit within one window
    - last_ip is advisory only and never used for enforcement
    """

    __tablename__ = "guest_quotas"
    __table_args__ = (
        CheckConstraint('count >= 0', name='guest_count_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
    )

    session_id: str = Field(
        index=True,
        unique=True,
        description="Opaque guest session identifier"
    )

    count: int = Field(default=0, description="Generations used in the current window")

    window_start_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Start of the current window (UTC)"
    )

    last_generation_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp of the most recent allowed generation"
    )

    last_ip: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Last client IP seen for this session (advisory)"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
