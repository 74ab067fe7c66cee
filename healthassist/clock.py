"""Current date and time in the single configured scheduling zone."""

from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo


class ZoneClock:
    """Supplies ``now`` and ``today`` in one zone; ``now_fn`` is injectable for tests."""

    def __init__(
        self, zone_name: str, now_fn: Optional[Callable[[ZoneInfo], datetime]] = None
    ) -> None:
        self.zone = ZoneInfo(zone_name)
        self._now_fn = now_fn or (lambda tz: datetime.now(tz))

    def now(self) -> datetime:
        return self._now_fn(self.zone).astimezone(self.zone)

    def today(self) -> date:
        return self.now().date()
