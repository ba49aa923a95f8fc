"""
Period Aggregation

Group activities into weekly, monthly or quarterly buckets and average
a per-activity value (pace by default) inside each bucket.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..models.activity import Activity


class PeriodGranularity(str, Enum):
    """Bucket sizes for period aggregation."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


@dataclass(frozen=True)
class PeriodBucket:
    """Activities sharing one period key."""

    label: str
    representative_date: datetime   # start of the earliest member
    average_value: float            # arithmetic mean, not distance-weighted
    activity_count: int
    activity_ids: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "period": self.label,
            "date": self.representative_date.isoformat(),
            "average_value": self.average_value,
            "count": self.activity_count,
        }


def period_key(day: date, granularity: PeriodGranularity) -> str:
    """
    Bucket key for a calendar date.

    weekly: ISO week of the Monday-anchored week, 'YYYY-Www'
    monthly: 'YYYY-MM'
    quarterly: 'YYYY-Qn'
    """
    if granularity == PeriodGranularity.WEEKLY:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if granularity == PeriodGranularity.MONTHLY:
        return f"{day.year}-{day.month:02d}"
    if granularity == PeriodGranularity.QUARTERLY:
        return f"{day.year}-Q{(day.month - 1) // 3 + 1}"
    raise ValueError(f"Unknown period granularity: {granularity!r}")


def _pace(activity: Activity) -> float:
    return activity.pace_sec_per_meter


def aggregate_by_period(
    activities: Iterable[Activity],
    granularity: PeriodGranularity,
    value: Optional[Callable[[Activity], float]] = None,
) -> List[PeriodBucket]:
    """
    Partition activities into period buckets.

    Activities are sorted chronologically first, so the result does not
    depend on input order. Every activity lands in exactly one bucket.

    Args:
        activities: Activities of one sport
        granularity: Bucket size
        value: Per-activity value to average; seconds per meter pace if omitted

    Returns:
        Buckets ordered by representative date, empty for empty input
    """
    value = value or _pace
    ordered = sorted(activities, key=lambda a: a.local_start)

    groups: "OrderedDict[str, List[Activity]]" = OrderedDict()
    for activity in ordered:
        key = period_key(activity.local_date, granularity)
        groups.setdefault(key, []).append(activity)

    buckets = []
    for key, members in groups.items():
        values = [value(a) for a in members]
        buckets.append(PeriodBucket(
            label=key,
            representative_date=members[0].local_start,
            average_value=sum(values) / len(values),
            activity_count=len(members),
            activity_ids=tuple(a.id for a in members),
        ))

    buckets.sort(key=lambda b: b.representative_date)
    return buckets


def monthly_distance(activities: Iterable[Activity]) -> Dict[int, float]:
    """Total meters per calendar month, 1..12, zero-filled."""
    totals = {month: 0.0 for month in range(1, 13)}
    for activity in activities:
        totals[activity.local_date.month] += activity.distance_m
    return totals
