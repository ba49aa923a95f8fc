"""
Year-over-Year History

Per-year pace summaries, split by distance range, and the regression
across years that tells whether the athlete is getting faster.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from ..models.activity import Activity
from ..models.sports import MetricKind, is_improving
from ..utils.units import convert_pace_to_minutes_per_mile
from .trends import fit_trendline


@dataclass(frozen=True)
class DistanceRange:
    """A band of run distances, lower bound inclusive."""

    key: str
    label: str
    min_m: float
    max_m: Optional[float] = None

    def contains(self, distance_m: float) -> bool:
        if distance_m < self.min_m:
            return False
        return self.max_m is None or distance_m < self.max_m


HALF_MARATHON_M = 21097

DISTANCE_RANGES: Tuple[DistanceRange, ...] = (
    DistanceRange("short", "Short Runs (< 5K)", 0, 5000),
    DistanceRange("medium", "Medium Runs (5K-10K)", 5000, 10000),
    DistanceRange("long", "Long Runs (10K-Half)", 10000, HALF_MARATHON_M),
    DistanceRange("ultra_long", "Ultra Long (Half+)", HALF_MARATHON_M),
)


def distance_range_label(key: str) -> str:
    for distance_range in DISTANCE_RANGES:
        if distance_range.key == key:
            return distance_range.label
    return key


@dataclass
class RangeStats:
    """Totals for the runs inside one distance range."""

    count: int = 0
    average_pace: float = 0.0     # sec/m, total time over total distance
    total_distance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "count": self.count,
            "average_pace": self.average_pace,
            "total_distance": self.total_distance,
        }


def _range_stats(activities: Sequence[Activity]) -> RangeStats:
    total_distance = sum(a.distance_m for a in activities)
    total_time = sum(a.moving_time_sec for a in activities)
    return RangeStats(
        count=len(activities),
        average_pace=total_time / total_distance if total_distance > 0 else 0.0,
        total_distance=total_distance,
    )


@dataclass
class YearSummary:
    """One calendar year of activities for a single sport."""

    year: int
    total_runs: int
    total_distance: float         # meters
    total_time: float             # seconds moving
    average_pace: float           # sec/m, 0 when there is no data
    range_analysis: Dict[str, RangeStats] = field(default_factory=dict)
    activities: List[Activity] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.total_runs > 0

    @property
    def average_pace_min_per_mile(self) -> float:
        return convert_pace_to_minutes_per_mile(self.average_pace)

    def to_dict(self, include_activities: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "year": self.year,
            "total_runs": self.total_runs,
            "total_distance": self.total_distance,
            "total_time": self.total_time,
            "average_pace": self.average_pace,
            "average_pace_min_per_mile": round(self.average_pace_min_per_mile, 3),
            "range_analysis": {key: stats.to_dict() for key, stats in self.range_analysis.items()},
        }
        if include_activities:
            result["activities"] = [a.to_dict() for a in self.activities]
        return result


def summarize_year(year: int, activities: Iterable[Activity]) -> YearSummary:
    """
    Build the summary for one year of already sport-filtered activities.

    Average pace is total moving time over total distance, so long runs
    weigh more than short ones.
    """
    activities = list(activities)
    overall = _range_stats(activities)

    return YearSummary(
        year=year,
        total_runs=overall.count,
        total_distance=overall.total_distance,
        total_time=float(sum(a.moving_time_sec for a in activities)),
        average_pace=overall.average_pace,
        range_analysis={
            r.key: _range_stats([a for a in activities if r.contains(a.distance_m)])
            for r in DISTANCE_RANGES
        },
        activities=activities,
    )


def empty_year_summary(year: int) -> YearSummary:
    """Zero-valued summary standing in for a year whose data is unavailable."""
    return summarize_year(year, [])


class YearPace(Protocol):
    year: int
    average_pace: float


YearPaceT = TypeVar("YearPaceT", bound=YearPace)


@dataclass(frozen=True)
class YearOverYearTrend:
    """Regression of average pace against calendar year."""

    slope: float        # pace change per year
    intercept: float
    is_improving: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "is_improving": self.is_improving,
        }


def analyze_year_over_year(yearly: Sequence[YearPace]) -> Optional[YearOverYearTrend]:
    """
    Fit average pace against the year itself.

    Returns:
        The trend, or None with fewer than two years. A falling pace
        means the athlete is getting faster.
    """
    if len(yearly) < 2:
        return None

    ordered = sorted(yearly, key=lambda y: y.year)
    line = fit_trendline(
        [y.average_pace for y in ordered],
        [y.year for y in ordered],
    )
    return YearOverYearTrend(
        slope=line.slope,
        intercept=line.intercept,
        is_improving=is_improving(MetricKind.PACE, line.slope),
    )


def find_best_and_worst_years(
    yearly: Sequence[YearPaceT],
) -> Tuple[Optional[YearPaceT], Optional[YearPaceT]]:
    """Fastest and slowest years by average pace, ignoring years with no pace."""
    valid = [y for y in yearly if y.average_pace > 0]
    if not valid:
        return None, None

    best = min(valid, key=lambda y: y.average_pace)
    worst = max(valid, key=lambda y: y.average_pace)
    return best, worst


def calculate_pace_improvement(old_pace: float, new_pace: float) -> float:
    """Percent pace improvement; positive means faster."""
    if old_pace == 0 or new_pace == 0:
        return 0.0
    return ((old_pace - new_pace) / old_pace) * 100
