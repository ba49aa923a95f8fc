"""
Yearly Distance Goal Pacing

Compare cumulative distance against an even-pace schedule for the
year and work out weekly and daily targets to finish or catch up.

Every function takes the current date explicitly. The year is treated
as `DAYS_IN_YEAR` days long; leap years are not special-cased, so in a
leap year the on-pace schedule reaches the goal on Dec 30.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..models.activity import Activity


DAYS_IN_YEAR = 365
DEFAULT_CATCH_UP_WEEKS = (4, 13)

DateLike = Union[date, datetime]


def _as_date(today: DateLike) -> date:
    if isinstance(today, datetime):
        return today.date()
    return today


def _check_goal(yearly_goal: float) -> None:
    if yearly_goal <= 0:
        raise ValueError(f"Yearly goal must be positive, got {yearly_goal}")


def _check_distance(distance: float) -> None:
    if distance < 0:
        raise ValueError(f"Cumulative distance cannot be negative, got {distance}")


# =============================================================================
# Calendar helpers
# =============================================================================


def days_elapsed_in_year(today: DateLike) -> int:
    """Day of the year, 1 on Jan 1."""
    return _as_date(today).timetuple().tm_yday


def days_remaining_in_year(today: DateLike) -> int:
    """Whole days from today until Dec 31, 0 on Dec 31."""
    today = _as_date(today)
    return (date(today.year, 12, 31) - today).days


def weeks_remaining_in_year(today: DateLike) -> int:
    return math.ceil(days_remaining_in_year(today) / 7)


# =============================================================================
# Pacing
# =============================================================================


def expected_progress_to_date(
    yearly_goal: float,
    today: DateLike,
    days_in_year: int = DAYS_IN_YEAR,
) -> float:
    """Distance an even pace would have covered by today."""
    _check_goal(yearly_goal)
    return (days_elapsed_in_year(today) / days_in_year) * yearly_goal


def progress_difference(
    cumulative_distance: float,
    yearly_goal: float,
    today: DateLike,
    days_in_year: int = DAYS_IN_YEAR,
) -> float:
    """Signed distance against even pace; positive means ahead."""
    _check_distance(cumulative_distance)
    return cumulative_distance - expected_progress_to_date(yearly_goal, today, days_in_year)


def weekly_distance_to_goal(remaining_distance: float, weeks_remaining: int) -> float:
    if weeks_remaining <= 0:
        return 0.0
    return remaining_distance / weeks_remaining


def required_daily_distance(remaining_distance: float, days_remaining: int) -> float:
    if days_remaining <= 0:
        return 0.0
    return remaining_distance / days_remaining


def weekly_distance_to_finish(
    cumulative_distance: float,
    yearly_goal: float,
    today: DateLike,
) -> float:
    """Weekly distance that spreads what is left of the goal over the remaining weeks."""
    _check_goal(yearly_goal)
    _check_distance(cumulative_distance)
    remaining = max(0.0, yearly_goal - cumulative_distance)
    return weekly_distance_to_goal(remaining, weeks_remaining_in_year(today))


def weekly_distance_to_catch_up(
    cumulative_distance: float,
    yearly_goal: float,
    weeks_to_target: int,
    today: DateLike,
    days_in_year: int = DAYS_IN_YEAR,
) -> float:
    """
    Weekly distance that puts the athlete back on pace in `weeks_to_target` weeks.

    Falls back to the finish target when already on pace or ahead, or
    when fewer weeks than that are left in the year.
    """
    delta = progress_difference(cumulative_distance, yearly_goal, today, days_in_year)
    weeks_remaining = weeks_remaining_in_year(today)

    if delta >= 0 or weeks_to_target <= 0 or weeks_remaining <= weeks_to_target:
        return weekly_distance_to_finish(cumulative_distance, yearly_goal, today)

    target_day = days_elapsed_in_year(today) + weeks_to_target * 7
    expected_at_target = (target_day / days_in_year) * yearly_goal
    return (expected_at_target - cumulative_distance) / weeks_to_target


@dataclass
class GoalPacing:
    """Where the athlete stands against a yearly distance goal."""

    as_of: date
    cumulative_distance: float
    yearly_goal: float

    expected_progress: float
    progress_delta: float            # positive = ahead of pace
    percent_complete: float
    remaining_distance: float
    surplus_distance: float          # distance past the goal once achieved

    days_elapsed: int
    days_remaining: int
    weeks_remaining: int

    weekly_to_finish: float
    catch_up: Dict[int, float] = field(default_factory=dict)  # weeks -> weekly distance
    current_daily_average: float = 0.0
    required_daily_distance: float = 0.0

    @property
    def is_ahead(self) -> bool:
        return self.progress_delta >= 0

    @property
    def goal_achieved(self) -> bool:
        return self.cumulative_distance >= self.yearly_goal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "as_of": self.as_of.isoformat(),
            "cumulative_distance": self.cumulative_distance,
            "yearly_goal": self.yearly_goal,
            "expected_progress": self.expected_progress,
            "progress_delta": self.progress_delta,
            "is_ahead": self.is_ahead,
            "goal_achieved": self.goal_achieved,
            "percent_complete": round(self.percent_complete, 1),
            "remaining_distance": self.remaining_distance,
            "surplus_distance": self.surplus_distance,
            "days_elapsed": self.days_elapsed,
            "days_remaining": self.days_remaining,
            "weeks_remaining": self.weeks_remaining,
            "weekly_to_finish": self.weekly_to_finish,
            "catch_up": {str(weeks): distance for weeks, distance in self.catch_up.items()},
            "current_daily_average": self.current_daily_average,
            "required_daily_distance": self.required_daily_distance,
        }


def compute_goal_pacing(
    cumulative_distance: float,
    yearly_goal: float,
    today: DateLike,
    catch_up_weeks: Sequence[int] = DEFAULT_CATCH_UP_WEEKS,
    days_in_year: int = DAYS_IN_YEAR,
) -> GoalPacing:
    """
    Compute the full pacing picture for one day.

    Args:
        cumulative_distance: Distance covered so far this year (meters)
        yearly_goal: Goal for the year (meters)
        today: Current date
        catch_up_weeks: Recovery horizons to compute catch-up targets for
        days_in_year: Length of the pacing year

    Returns:
        GoalPacing for `today`
    """
    _check_goal(yearly_goal)
    _check_distance(cumulative_distance)
    today = _as_date(today)

    days_elapsed = days_elapsed_in_year(today)
    days_remaining = days_remaining_in_year(today)
    remaining = max(0.0, yearly_goal - cumulative_distance)
    expected = expected_progress_to_date(yearly_goal, today, days_in_year)

    return GoalPacing(
        as_of=today,
        cumulative_distance=cumulative_distance,
        yearly_goal=yearly_goal,
        expected_progress=expected,
        progress_delta=cumulative_distance - expected,
        percent_complete=(cumulative_distance / yearly_goal) * 100,
        remaining_distance=remaining,
        surplus_distance=max(0.0, cumulative_distance - yearly_goal),
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        weeks_remaining=weeks_remaining_in_year(today),
        weekly_to_finish=weekly_distance_to_finish(cumulative_distance, yearly_goal, today),
        catch_up={
            weeks: weekly_distance_to_catch_up(
                cumulative_distance, yearly_goal, weeks, today, days_in_year
            )
            for weeks in catch_up_weeks
        },
        current_daily_average=cumulative_distance / days_elapsed,
        required_daily_distance=required_daily_distance(remaining, days_remaining),
    )


# =============================================================================
# Progress series
# =============================================================================


@dataclass(frozen=True)
class ProgressPoint:
    """Cumulative distance against the even-pace target on one day."""

    day: int                  # days since Jan 1
    date: date
    actual: Optional[float]   # None on the year-end target point
    target: float

    @property
    def difference(self) -> Optional[float]:
        if self.actual is None:
            return None
        return self.actual - self.target

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "day": self.day,
            "date": self.date.isoformat(),
            "actual": self.actual,
            "target": self.target,
            "difference": self.difference,
        }


def build_progress_series(
    activities: Iterable[Activity],
    yearly_goal: float,
    today: DateLike,
    days_in_year: int = DAYS_IN_YEAR,
) -> List[ProgressPoint]:
    """
    One point per day from Jan 1 through today, then a year-end target point
    unless today is already Dec 31.

    Activities are counted on their local start date.
    """
    _check_goal(yearly_goal)
    today = _as_date(today)
    year_start = date(today.year, 1, 1)

    by_day: Dict[date, float] = {}
    for activity in activities:
        day = activity.local_date
        by_day[day] = by_day.get(day, 0.0) + activity.distance_m

    last_day = min((today - year_start).days, days_in_year)
    cumulative = 0.0
    points = []
    for offset in range(last_day + 1):
        current = year_start + timedelta(days=offset)
        cumulative += by_day.get(current, 0.0)
        points.append(ProgressPoint(
            day=offset,
            date=current,
            actual=cumulative,
            target=(offset / days_in_year) * yearly_goal,
        ))

    year_end = date(today.year, 12, 31)
    if points[-1].date < year_end:
        points.append(ProgressPoint(
            day=days_in_year,
            date=year_end,
            actual=None,
            target=yearly_goal,
        ))
    return points
