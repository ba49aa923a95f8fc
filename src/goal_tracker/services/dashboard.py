"""
Dashboard service.

Fetches an athlete's activities for the requested calendar years,
filters them to one sport and hands them to the analysis engine.
Every method takes the current date explicitly.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ..analysis.goals import GoalPacing, ProgressPoint, build_progress_series, compute_goal_pacing
from ..analysis.history import (
    YearOverYearTrend,
    YearSummary,
    analyze_year_over_year,
    calculate_pace_improvement,
    empty_year_summary,
    find_best_and_worst_years,
    summarize_year,
)
from ..analysis.periods import PeriodBucket, PeriodGranularity, aggregate_by_period, monthly_distance
from ..analysis.trends import (
    TrendLine,
    days_since_first,
    fit_trendline,
    fit_trendline_by_date,
    trend_points,
)
from ..config import Settings, get_settings
from ..models.activity import Activity
from ..models.sports import (
    MetricKind,
    SportKind,
    TrendDirection,
    get_sport_config,
    performance_direction,
    volume_direction,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Activity Source Protocol
# =============================================================================


@runtime_checkable
class ActivitySource(Protocol):
    """Anything that can list an athlete's activities and profile."""

    async def list_activities(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Activity]:
        ...

    async def get_athlete(self) -> Dict[str, Any]:
        ...

    async def get_athlete_stats(self, athlete_id: Optional[str] = None) -> Dict[str, Any]:
        ...


# =============================================================================
# Result Models
# =============================================================================


class PaceView(str, Enum):
    """What the pace-analysis trendline is fitted over."""

    METRIC = "metric"       # pace or speed, per the sport
    DISTANCE = "distance"   # miles per activity


@dataclass
class YearActivities:
    """The current year's activities for one sport."""

    year: int
    sport: SportKind
    activities: List[Activity]
    total_distance: float
    monthly_distance: Dict[int, float]
    recent: List[Activity]

    @property
    def count(self) -> int:
        return len(self.activities)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "year": self.year,
            "sport": self.sport.value,
            "activities": [a.to_dict() for a in self.activities],
            "total_distance": self.total_distance,
            "monthly_distance": {str(m): d for m, d in self.monthly_distance.items()},
            "count": self.count,
            "recent": [a.to_dict() for a in self.recent],
        }


@dataclass
class GoalProgressReport:
    """Year-to-date activities with pacing against a yearly goal."""

    year_activities: YearActivities
    pacing: GoalPacing
    monthly_target: float
    progress_series: List[ProgressPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "year": self.year_activities.year,
            "sport": self.year_activities.sport.value,
            "total_distance": self.year_activities.total_distance,
            "count": self.year_activities.count,
            "monthly_distance": {
                str(m): d for m, d in self.year_activities.monthly_distance.items()
            },
            "monthly_target": self.monthly_target,
            "pacing": self.pacing.to_dict(),
            "progress_series": [p.to_dict() for p in self.progress_series],
            "recent": [a.to_dict() for a in self.year_activities.recent],
        }


@dataclass
class HistoricalReport:
    """Multi-year pace history, newest year first."""

    sport: SportKind
    years: List[YearSummary]
    trend: Optional[YearOverYearTrend]
    best_year: Optional[YearSummary]
    worst_year: Optional[YearSummary]
    overall_improvement: float        # percent, positive = faster

    @property
    def total_runs(self) -> int:
        return sum(y.total_runs for y in self.years)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sport": self.sport.value,
            "yearly_data": [y.to_dict() for y in self.years],
            "trend": self.trend.to_dict() if self.trend else None,
            "best_year": self.best_year.year if self.best_year else None,
            "worst_year": self.worst_year.year if self.worst_year else None,
            "total_runs": self.total_runs,
            "overall_improvement": round(self.overall_improvement, 2),
        }


@dataclass(frozen=True)
class PaceSample:
    """One activity as a point in the pace analysis."""

    activity: Activity
    value: float      # pace (min/mi), speed (mph) or distance (mi), per view
    trend: float      # trendline value at this sample

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.activity.id,
            "name": self.activity.name,
            "date": self.activity.local_start.isoformat(),
            "distance": self.activity.distance_m,
            "moving_time": self.activity.moving_time_sec,
            "pace": self.activity.pace_min_per_mile,
            "speed": self.activity.speed_mph,
            "value": self.value,
            "trend": self.trend,
        }


@dataclass
class PaceAnalysisReport:
    """Per-activity and per-period trends over several years."""

    sport: SportKind
    years: int
    granularity: PeriodGranularity
    view: PaceView
    samples: List[PaceSample]
    trendline: TrendLine
    direction: TrendDirection
    buckets: List[PeriodBucket]
    bucket_trendline: TrendLine

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sport": self.sport.value,
            "years": self.years,
            "period": self.granularity.value,
            "view": self.view.value,
            "count": len(self.samples),
            "activities": [s.to_dict() for s in self.samples],
            "trendline": self.trendline.to_dict(),
            "direction": self.direction.value,
            "periods": [b.to_dict() for b in self.buckets],
            "period_trendline": self.bucket_trendline.to_dict(),
        }


# =============================================================================
# Service
# =============================================================================


def year_window(year: int) -> Tuple[datetime, datetime]:
    """Jan 1 00:00:00 through Dec 31 23:59:59 of a calendar year."""
    return datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59)


class DashboardService:
    """
    Request-scoped orchestration over one athlete's activity source.

    Usage:
        service = DashboardService(strava_client, settings)
        report = await service.get_goal_progress(goal_m, SportKind.RUN, date.today())
    """

    def __init__(self, source: ActivitySource, settings: Optional[Settings] = None):
        self.source = source
        self.settings = settings or get_settings()

    async def _fetch_year(self, year: int, sport: SportKind) -> List[Activity]:
        start, end = year_window(year)
        activities = await self.source.list_activities(start, end)
        filtered = [a for a in activities if a.sport_type == sport.value]
        logger.debug(f"Fetched {len(activities)} activities for {year}, {len(filtered)} {sport.value}")
        return filtered

    # -------------------------------------------------------------------------
    # Current year
    # -------------------------------------------------------------------------

    async def get_year_activities(self, sport: SportKind, today: date) -> YearActivities:
        """Current year's activities. Fetch failures propagate."""
        activities = await self._fetch_year(today.year, sport)

        recent = sorted(activities, key=lambda a: a.local_start, reverse=True)
        return YearActivities(
            year=today.year,
            sport=sport,
            activities=activities,
            total_distance=sum(a.distance_m for a in activities),
            monthly_distance=monthly_distance(activities),
            recent=recent[: self.settings.recent_activities_limit],
        )

    async def get_goal_progress(
        self,
        yearly_goal: float,
        sport: SportKind,
        today: date,
    ) -> GoalProgressReport:
        """Year-to-date progress against `yearly_goal` meters."""
        year_activities = await self.get_year_activities(sport, today)
        days_in_year = self.settings.days_in_year

        pacing = compute_goal_pacing(
            year_activities.total_distance,
            yearly_goal,
            today,
            catch_up_weeks=self.settings.catch_up_weeks,
            days_in_year=days_in_year,
        )
        logger.info(
            f"{sport.value} goal progress for {today.year}: "
            f"{pacing.percent_complete:.1f}% complete, delta {pacing.progress_delta:.0f} m"
        )

        return GoalProgressReport(
            year_activities=year_activities,
            pacing=pacing,
            monthly_target=yearly_goal / 12,
            progress_series=build_progress_series(
                year_activities.activities, yearly_goal, today, days_in_year
            ),
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def _summarize_year(self, year: int, sport: SportKind) -> YearSummary:
        try:
            activities = await self._fetch_year(year, sport)
        except Exception as e:
            # Any failure for one year leaves that year empty
            logger.warning(f"Failed to fetch {sport.value} data for {year}: {e!r}")
            return empty_year_summary(year)
        return summarize_year(year, activities)

    async def get_historical(
        self,
        sport: SportKind,
        years: int,
        today: date,
    ) -> HistoricalReport:
        """
        Per-year summaries for the last `years` calendar years.

        Years are fetched concurrently. A year that fails to load counts
        as a year with no data instead of failing the whole report.
        """
        requested = [today.year - i for i in range(years)]
        summaries = await asyncio.gather(
            *(self._summarize_year(year, sport) for year in requested)
        )

        with_data = [s for s in summaries if s.has_data]
        best, worst = find_best_and_worst_years(with_data)

        improvement = 0.0
        if len(with_data) >= 2:
            improvement = calculate_pace_improvement(
                with_data[-1].average_pace, with_data[0].average_pace
            )

        logger.info(f"Historical {sport.value}: {len(with_data)} of {years} years with data")
        return HistoricalReport(
            sport=sport,
            years=with_data,
            trend=analyze_year_over_year(with_data),
            best_year=best,
            worst_year=worst,
            overall_improvement=improvement,
        )

    # -------------------------------------------------------------------------
    # Pace analysis
    # -------------------------------------------------------------------------

    def _value_for(self, sport: SportKind, view: PaceView) -> Callable[[Activity], float]:
        if view == PaceView.DISTANCE:
            return lambda a: a.distance_miles
        if get_sport_config(sport).metric == MetricKind.SPEED:
            return lambda a: a.speed_mph
        return lambda a: a.pace_min_per_mile

    def _direction(self, sport: SportKind, view: PaceView, slope: float) -> TrendDirection:
        if view == PaceView.DISTANCE:
            return volume_direction(slope)
        return performance_direction(get_sport_config(sport).metric, slope)

    def _fit(self, dates: List[datetime], values: List[float]) -> Tuple[TrendLine, List[int]]:
        """Trendline over sample index, or over days since the first sample when configured."""
        if self.settings.date_weighted_trend:
            return fit_trendline_by_date(dates, values), days_since_first(dates)
        xs = list(range(len(values)))
        return fit_trendline(values, xs), xs

    async def get_pace_analysis(
        self,
        sport: SportKind,
        years: int,
        granularity: PeriodGranularity,
        view: PaceView,
        today: date,
    ) -> PaceAnalysisReport:
        """
        Trend of pace, speed or distance across every activity in the last `years` years.

        Samples with no pace or an unrealistically slow pace are dropped.
        Fetch failures propagate.
        """
        per_year = await asyncio.gather(
            *(self._fetch_year(today.year - i, sport) for i in range(years))
        )

        max_pace = self.settings.max_realistic_pace_min_per_mile
        activities = sorted(
            (a for batch in per_year for a in batch if 0 < a.pace_min_per_mile < max_pace),
            key=lambda a: a.local_start,
        )

        value = self._value_for(sport, view)
        values = [value(a) for a in activities]

        line, xs = self._fit([a.local_start for a in activities], values)

        buckets = aggregate_by_period(activities, granularity, value=value)
        bucket_line, _ = self._fit(
            [b.representative_date for b in buckets], [b.average_value for b in buckets]
        )

        samples = [
            PaceSample(activity=a, value=v, trend=t)
            for a, v, t in zip(activities, values, trend_points(line, xs))
        ]

        return PaceAnalysisReport(
            sport=sport,
            years=years,
            granularity=granularity,
            view=view,
            samples=samples,
            trendline=line,
            direction=self._direction(sport, view, line.slope),
            buckets=buckets,
            bucket_trendline=bucket_line,
        )

    # -------------------------------------------------------------------------
    # Athlete
    # -------------------------------------------------------------------------

    async def get_athlete_overview(self, athlete_id: Optional[str] = None) -> Dict[str, Any]:
        """Athlete profile and aggregate stats, fetched together."""
        athlete, stats = await asyncio.gather(
            self.source.get_athlete(),
            self.source.get_athlete_stats(athlete_id),
        )
        return {"athlete": athlete, "stats": stats}
