"""Activity window computation and repository pre-filtering."""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from gitdaily.models import ActivityWindow, Repository

MONDAY = 0

# Days to look back from local midnight, keyed by weekday (Monday == 0)
WEEKDAY_LOOKBACK = {MONDAY: 3}
DEFAULT_LOOKBACK = 1


def _as_aware(value: datetime) -> datetime:
    # Naive datetimes are local time
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _midnight(day: date, zone: Optional[tzinfo]) -> datetime:
    # Localized per day so the offset follows DST on that date
    if zone is None:
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=zone)


def cutoff_from_days_back(days: int, now: Optional[datetime] = None) -> datetime:
    """Return ``now`` minus ``days`` days.

    Args:
        days: Number of days to look back, must be positive
        now: Reference instant (defaults to the current UTC time)

    Raises:
        ValueError: If days is not positive
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")
    now = _as_aware(now) if now is not None else datetime.now(timezone.utc)
    return now - timedelta(days=days)


def cutoff_from_weekday(now: Optional[datetime] = None) -> datetime:
    """Return the standup cutoff: local midnight minus 3 days on Monday, else minus 1 day.

    On Monday this reaches back to Friday midnight so weekend work is included.
    """
    now = now if now is not None else datetime.now()
    lookback = WEEKDAY_LOOKBACK.get(now.weekday(), DEFAULT_LOOKBACK)
    return _midnight(now.date() - timedelta(days=lookback), now.tzinfo)


def days_back_window(days: int, now: Optional[datetime] = None) -> ActivityWindow:
    """Build an activity window covering the last ``days`` days."""
    label = "last day" if days == 1 else f"last {days} days"
    return ActivityWindow(cutoff=cutoff_from_days_back(days, now), label=label)


def standup_window(now: Optional[datetime] = None) -> ActivityWindow:
    """Build the "since yesterday, or since Friday on Monday" window."""
    now = now if now is not None else datetime.now()
    label = "since Friday" if now.weekday() == MONDAY else "since yesterday"
    return ActivityWindow(cutoff=cutoff_from_weekday(now), label=label)


def filter_by_update_time(
    repositories: Iterable[Repository],
    cutoff: datetime,
) -> List[Repository]:
    """Keep repositories updated strictly after ``cutoff``, preserving order."""
    cutoff = _as_aware(cutoff)
    return [repo for repo in repositories if _as_aware(repo.updated_at) > cutoff]
