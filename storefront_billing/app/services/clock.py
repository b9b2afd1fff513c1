"""Clock Service Interface

All persisted timestamps are naive UTC. Calendar questions (which month is
it?) are answered in one configured timezone so that a monthly reset happens
at the same local midnight for every account.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo


def load_timezone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class Clock(ABC):
    """Source of the current time for use cases"""

    def __init__(self, timezone_name: str = "UTC"):
        self.timezone_name = timezone_name or "UTC"
        self.tz = load_timezone(self.timezone_name)

    @abstractmethod
    def now(self) -> datetime:
        """
        Current instant

        Returns:
            Naive datetime in UTC
        """
        pass

    def to_local(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def month_key(self, moment: datetime) -> str:
        return self.to_local(moment).strftime("%Y-%m")

    def same_month(self, first: datetime, second: datetime) -> bool:
        return self.month_key(first) == self.month_key(second)

    def start_of_month(self, moment: datetime) -> datetime:
        """First instant of moment's local month, as naive UTC"""
        local = self.to_local(moment)
        start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return start.astimezone(timezone.utc).replace(tzinfo=None)
