"""Due-date urgency rules for taskmatrix.

All timestamps are milliseconds since the epoch.
"""

from datetime import date, datetime, time as dt_time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from taskmatrix.models.constants import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    DUE_URGENCY_BUCKETS,
    DUE_URGENCY_FALLBACK,
    DUE_SOON_WINDOW_MS,
    DUE_NEAR_WINDOW_MS,
)
from taskmatrix.models.task import DueDelta, DueStatus


DEFAULT_DUE_TIME = dt_time(18, 0)


def min_urgency(due_at: int, now: int) -> int:
    """Minimum urgency score implied by due-date proximity.

    The distance is taken as |due_at - now|, so an overdue task is treated the
    same as one due equally far in the future. Bucket bounds are inclusive.

    Args:
        due_at: Due timestamp (ms)
        now: Current timestamp (ms)

    Returns:
        60 (<= 24h), 45 (<= 72h), 30 (<= 7d) or 10
    """
    abs_diff = abs(due_at - now)
    for upper_bound, floor in DUE_URGENCY_BUCKETS:
        if abs_diff <= upper_bound:
            return floor
    return DUE_URGENCY_FALLBACK


def due_delta(due_at: int, now: int) -> DueDelta:
    """Decompose |due_at - now| into whole days, hours and minutes."""
    abs_diff = abs(due_at - now)
    return DueDelta(
        days=abs_diff // DAY_MS,
        hours=(abs_diff % DAY_MS) // HOUR_MS,
        minutes=(abs_diff % HOUR_MS) // MINUTE_MS,
        overdue=due_at < now,
    )


def to_local_datetime(timestamp: int, time_zone: str = "UTC") -> datetime:
    """Convert a ms timestamp to an aware datetime in the given zone."""
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).astimezone(ZoneInfo(time_zone))


def resolve_due(due_date: date, due_time: Optional[dt_time] = None, time_zone: str = "UTC") -> int:
    """Convert a local due date (and optional time) to a ms timestamp.

    A date without a time is due at the end of the working day.
    """
    local = datetime.combine(due_date, due_time or DEFAULT_DUE_TIME, tzinfo=ZoneInfo(time_zone))
    return int(local.timestamp() * 1000)


def due_status(due_at: Optional[int], now: int, time_zone: str = "UTC") -> DueStatus:
    """Classify a due timestamp relative to now for display.

    Overdue wins over "today"; "today" means the same calendar date in the
    given time zone.
    """
    if due_at is None:
        return DueStatus.NONE
    diff = due_at - now
    if diff < 0:
        return DueStatus.OVERDUE
    if to_local_datetime(due_at, time_zone).date() == to_local_datetime(now, time_zone).date():
        return DueStatus.TODAY
    if diff < DUE_SOON_WINDOW_MS:
        return DueStatus.LT24H
    if diff < DUE_NEAR_WINDOW_MS:
        return DueStatus.LT72H
    return DueStatus.NONE
