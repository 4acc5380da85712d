# lokalaku/utils/local_time.py
# Wall-clock time in the marketplace's reference zone, bucketed into day periods.

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

class DayPeriod(str, Enum):
    MORNING = "morning"
    NOON = "noon"
    AFTERNOON = "afternoon"
    NIGHT = "night"

def period_for_hour(hour: int) -> DayPeriod:
    """[5,11) morning, [11,15) noon, [15,18) afternoon, anything else night."""
    if 5 <= hour < 11:
        return DayPeriod.MORNING
    if 11 <= hour < 15:
        return DayPeriod.NOON
    if 15 <= hour < 18:
        return DayPeriod.AFTERNOON
    return DayPeriod.NIGHT

@dataclass(frozen=True)
class LocalMoment:
    when: datetime
    period: DayPeriod

    @property
    def time_text(self) -> str:
        return self.when.strftime("%H:%M")

    @property
    def date_text(self) -> str:
        return self.when.strftime("%A, %d %B %Y")

    def period_label(self, texts: dict) -> str:
        return texts[f"period_{self.period.value}"]

def local_moment(tz_name: str, now: Optional[datetime] = None) -> LocalMoment:
    """Convert ``now`` (default: current UTC time) into ``tz_name`` local time.

    Naive datetimes are taken to be UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz_name))
    return LocalMoment(when=local, period=period_for_hour(local.hour))
