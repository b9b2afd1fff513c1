from datetime import datetime, timezone
from storefront_billing.app.services.clock import Clock


class SystemClock(Clock):
    """Wall clock, naive UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)
