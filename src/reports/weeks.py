"""Trading-week bucketing relative to a fixed weekly boundary."""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from src.config import config

logger = logging.getLogger(__name__)

WEEK_SECONDS = 7 * 24 * 60 * 60


class TradingWeekCalculator:
    """
    Maps sale timestamps to trading-week numbers.

    Trading weeks start at a fixed weekday and time of day (by default Tuesday
    14:00 UTC). Week 0 is the week containing "now", -1 the week before, and so
    on. An instant exactly on a boundary belongs to the week that starts there.
    """

    def __init__(
        self,
        weekday: int = config.TRADING_WEEK_WEEKDAY,
        hour: int = config.TRADING_WEEK_HOUR,
        minute: int = config.TRADING_WEEK_MINUTE,
        tz: str = config.TRADING_WEEK_TZ,
    ):
        self.weekday = weekday
        self.boundary_time = time(hour, minute)
        self.tz = ZoneInfo(tz)

    def anchor_before(self, now: datetime) -> datetime:
        """Latest boundary instant at or before now, as an aware UTC datetime."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        local_now = now.astimezone(self.tz)

        days_since = (local_now.weekday() - self.weekday) % 7
        boundary_date = local_now.date() - timedelta(days=days_since)
        anchor = datetime.combine(boundary_date, self.boundary_time, tzinfo=self.tz)
        # same-zone comparison ignores fold, so compare instants
        if now.timestamp() < anchor.timestamp():
            anchor = datetime.combine(
                boundary_date - timedelta(days=7), self.boundary_time, tzinfo=self.tz
            )
        return anchor.astimezone(timezone.utc)

    def anchor_timestamp(self, now: datetime) -> int:
        return int(self.anchor_before(now).timestamp())

    def week_number(self, sale_timestamp: int, now: datetime) -> int:
        """floor((sale - anchor) / 7 days), using whole epoch seconds."""
        return self.week_number_from_anchor(sale_timestamp, self.anchor_timestamp(now))

    @staticmethod
    def week_number_from_anchor(sale_timestamp: int, anchor_timestamp: int) -> int:
        return (sale_timestamp - anchor_timestamp) // WEEK_SECONDS

    def week_bounds(self, week_number: int, now: datetime) -> tuple[datetime, datetime]:
        """[start, end) of a trading week, as aware UTC datetimes."""
        return self.week_bounds_from_anchor(week_number, self.anchor_before(now))

    @staticmethod
    def week_bounds_from_anchor(week_number: int, anchor: datetime) -> tuple[datetime, datetime]:
        start = anchor + timedelta(seconds=week_number * WEEK_SECONDS)
        return start, start + timedelta(seconds=WEEK_SECONDS)


def utc_now(now: Optional[datetime] = None) -> datetime:
    return now or datetime.now(timezone.utc)
