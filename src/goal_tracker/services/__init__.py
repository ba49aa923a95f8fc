"""Service layer for the Goal Tracker."""

from .dashboard import (
    ActivitySource,
    DashboardService,
    GoalProgressReport,
    HistoricalReport,
    PaceAnalysisReport,
    PaceSample,
    PaceView,
    YearActivities,
    year_window,
)

__all__ = [
    "ActivitySource",
    "DashboardService",
    "GoalProgressReport",
    "HistoricalReport",
    "PaceAnalysisReport",
    "PaceSample",
    "PaceView",
    "YearActivities",
    "year_window",
]
