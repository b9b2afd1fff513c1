from typing import Optional
from pydantic import Field
from storefront_billing.app.use_cases.camel import CamelModel


class GuestQuotaRequestSchema(CamelModel):
    """POST /guest-quota/check; ``sessionId`` falls back to the X-Session-Id header"""

    session_id: Optional[str] = Field(default=None, max_length=255)
