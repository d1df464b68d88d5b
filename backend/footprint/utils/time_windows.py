"""
Calendar and time-window helpers for emission records.

Weeks start on Sunday. All datetimes are naive UTC.
"""

import calendar
import math
from datetime import datetime, timedelta, timezone, date
from typing import Any, Dict, Iterable, List, Optional


DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

SEASONS = ('Spring', 'Summer', 'Fall', 'Winter')


def start_of_day(value: datetime) -> datetime:
    return datetime(value.year, value.month, value.day)


def js_weekday(value: date) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return (value.weekday() + 1) % 7


def day_name(value: date) -> str:
    return DAY_NAMES[js_weekday(value)]


def week_start(value: datetime) -> datetime:
    """Midnight of the most recent Sunday (the same day if it is a Sunday)."""
    midnight = start_of_day(value)
    return midnight - timedelta(days=js_weekday(midnight))


def get_time_periods(now: datetime) -> Dict[str, datetime]:
    today = start_of_day(now)
    yesterday = today - timedelta(days=1)

    this_week_start = week_start(today)
    last_week_start = this_week_start - timedelta(days=7)

    month_start = datetime(today.year, today.month, 1)
    last_month_end = month_start - timedelta(days=1)
    last_month_start = datetime(last_month_end.year, last_month_end.month, 1)

    year_start = datetime(today.year, 1, 1)

    return {
        'today': today,
        'yesterday': yesterday,
        'week_start': this_week_start,
        'last_week_start': last_week_start,
        'month_start': month_start,
        'last_month_start': last_month_start,
        'last_month_end': last_month_end,
        'year_start': year_start,
    }


def filter_by_date_range(records: Iterable[Any], start: datetime, end: datetime) -> List[Any]:
    """Records with start <= timestamp < end."""
    return [r for r in records if start <= r.timestamp < end]


def filter_since(records: Iterable[Any], start: datetime) -> List[Any]:
    return [r for r in records if r.timestamp >= start]


def filter_days_back(records: Iterable[Any], now: datetime, days: int, offset_days: int = 0) -> List[Any]:
    """
    Records from the rolling window [now - (offset + days), now - offset).

    offset_days=0 gives the most recent `days` days; offset_days=days gives
    the window right before it.
    """
    end = now - timedelta(days=offset_days)
    return filter_by_date_range(records, end - timedelta(days=days), end)


def filter_same_day(records: Iterable[Any], day: date) -> List[Any]:
    return [r for r in records if r.timestamp.date() == day]


def day_key(value: datetime) -> str:
    return value.date().isoformat()


def week_key(value: datetime) -> str:
    return week_start(value).date().isoformat()


def month_key(value: datetime) -> str:
    return f'{value.year}-{value.month}'


def year_key(value: datetime) -> str:
    return str(value.year)


PERIOD_KEYS = {
    'day': day_key,
    'week': week_key,
    'month': month_key,
    'year': year_key,
}


def group_by_period(records: Iterable[Any], period: str = 'day') -> Dict[str, List[Any]]:
    """
    Group records into buckets keyed by day, week, month or year.

    Unknown periods fall back to day buckets. Keys keep first-seen order.
    """
    key_fn = PERIOD_KEYS.get(period, day_key)
    groups = {}
    for record in records:
        groups.setdefault(key_fn(record.timestamp), []).append(record)
    return groups


def get_season(month: int) -> str:
    """Northern-hemisphere meteorological season for a 1-based month."""
    if 3 <= month <= 5:
        return 'Spring'
    if 6 <= month <= 8:
        return 'Summer'
    if 9 <= month <= 11:
        return 'Fall'
    return 'Winter'


def is_weekend(value: date) -> bool:
    return js_weekday(value) in (0, 6)


def split_weekday_weekend(records: Iterable[Any]):
    weekday, weekend = [], []
    for record in records:
        (weekend if is_weekend(record.timestamp) else weekday).append(record)
    return weekday, weekend


def add_months(value: datetime, months: int) -> datetime:
    """First day of the month `months` away from value's month."""
    month_index = value.year * 12 + (value.month - 1) + months
    return datetime(month_index // 12, month_index % 12 + 1, 1)


def get_days_remaining_in_period(period: str, now: datetime) -> int:
    if period == 'daily':
        return 1
    if period == 'weekly':
        days_until_sunday = (7 - js_weekday(now)) % 7
        return 7 if days_until_sunday == 0 else days_until_sunday
    if period == 'monthly':
        last_day = calendar.monthrange(now.year, now.month)[1]
        return last_day - now.day
    if period == 'yearly':
        end_of_year = datetime(now.year, 12, 31)
        remaining = (end_of_year - now).total_seconds() / 86400
        return max(0, math.ceil(remaining))
    return 0


def days_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 86400


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime string; aware values become naive UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
