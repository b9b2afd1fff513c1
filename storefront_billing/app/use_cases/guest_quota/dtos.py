"""Guest quota DTOs"""

from datetime import datetime
from typing import Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel


class GuestQuotaCommandDTO(CamelModel):
    session_id: str = Field(..., min_length=1, max_length=255)
    ip: Optional[str] = Field(None, max_length=64)


class GuestQuotaResponseDTO(CamelModel):
    allowed: bool
    remaining: int
    resets_at: Optional[datetime] = None
