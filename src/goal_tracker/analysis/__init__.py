"""
Analysis engine for yearly distance goals.

Provides goal pacing, period aggregation, trendlines and
year-over-year pace history.
"""

from .goals import (
    DAYS_IN_YEAR,
    GoalPacing,
    ProgressPoint,
    build_progress_series,
    compute_goal_pacing,
    days_elapsed_in_year,
    days_remaining_in_year,
    expected_progress_to_date,
    progress_difference,
    weekly_distance_to_catch_up,
    weekly_distance_to_finish,
    weekly_distance_to_goal,
    weeks_remaining_in_year,
)
from .periods import (
    PeriodBucket,
    PeriodGranularity,
    aggregate_by_period,
    monthly_distance,
    period_key,
)
from .trends import (
    TrendLine,
    fit_trendline,
    fit_trendline_by_date,
    trend_points,
)
from .history import (
    DISTANCE_RANGES,
    RangeStats,
    YearOverYearTrend,
    YearSummary,
    analyze_year_over_year,
    calculate_pace_improvement,
    empty_year_summary,
    find_best_and_worst_years,
    summarize_year,
)

__all__ = [
    # Goals
    "DAYS_IN_YEAR",
    "GoalPacing",
    "ProgressPoint",
    "build_progress_series",
    "compute_goal_pacing",
    "days_elapsed_in_year",
    "days_remaining_in_year",
    "expected_progress_to_date",
    "progress_difference",
    "weekly_distance_to_catch_up",
    "weekly_distance_to_finish",
    "weekly_distance_to_goal",
    "weeks_remaining_in_year",
    # Periods
    "PeriodBucket",
    "PeriodGranularity",
    "aggregate_by_period",
    "monthly_distance",
    "period_key",
    # Trends
    "TrendLine",
    "fit_trendline",
    "fit_trendline_by_date",
    "trend_points",
    # History
    "DISTANCE_RANGES",
    "RangeStats",
    "YearOverYearTrend",
    "YearSummary",
    "analyze_year_over_year",
    "calculate_pace_improvement",
    "empty_year_summary",
    "find_best_and_worst_years",
    "summarize_year",
]
