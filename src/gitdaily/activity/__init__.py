"""Activity windows, repository filtering and commit aggregation."""

from gitdaily.activity.aggregator import CommitAggregator
from gitdaily.activity.window import (
    cutoff_from_days_back,
    cutoff_from_weekday,
    days_back_window,
    filter_by_update_time,
    standup_window,
)

__all__ = [
    "CommitAggregator",
    "cutoff_from_days_back",
    "cutoff_from_weekday",
    "days_back_window",
    "standup_window",
    "filter_by_update_time",
]
