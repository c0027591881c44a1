# backend/reservas/services/slots/clock.py
"""
Local civil time ↔ instant conversion for one restaurant timezone.

Every datetime handed out is timezone-aware. Arithmetic goes through UTC
so adding minutes across a DST change adds real elapsed time.
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


class LocalClock:
    """Timezone helper bound to one IANA zone."""

    def __init__(self, tz_name: str):
        self.tz_name = tz_name
        self.tz = ZoneInfo(tz_name)

    def at(self, target_date: date, time_str: str) -> datetime:
        """Instant of "HH:MM" on target_date, local time."""
        hour, minute = time_str.split(":")
        return datetime.combine(target_date, time(int(hour), int(minute)), tzinfo=self.tz)

    def start_of_day(self, target_date: date) -> datetime:
        return datetime.combine(target_date, time.min, tzinfo=self.tz)

    def day_window(self, target_date: date) -> tuple[datetime, datetime]:
        """[local midnight, next local midnight)."""
        return (
            self.start_of_day(target_date),
            self.start_of_day(target_date + timedelta(days=1)),
        )

    def localize(self, value: datetime) -> datetime:
        """Convert an instant to local time. Naive values are read as local."""
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    def add_minutes(self, value: datetime, minutes: int) -> datetime:
        utc = value.astimezone(timezone.utc) + timedelta(minutes=minutes)
        return utc.astimezone(self.tz)

    @staticmethod
    def format_time(value: datetime) -> str:
        return value.strftime("%H:%M")
