"""Dashboard data routes backed by the athlete's Strava activities."""

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_athlete_id, get_dashboard_service, get_today
from ...analysis.periods import PeriodGranularity
from ...config import Settings, get_settings
from ...exceptions import ValidationError
from ...models.sports import SportKind, get_sport_config
from ...services.dashboard import DashboardService, PaceView

logger = logging.getLogger(__name__)


router = APIRouter()


def _parse_sport(sport: str) -> SportKind:
    kind = SportKind.from_string(sport)
    if kind is None:
        raise ValidationError(f"Unsupported sport: {sport}", field="sport")
    return kind


def _check_years(years: int, settings: Settings) -> int:
    if years > settings.max_analysis_years:
        raise ValidationError(
            f"At most {settings.max_analysis_years} years can be analyzed",
            field="years",
        )
    return years


@router.get("/activities")
async def get_activities(
    sport: str = Query(default="Run"),
    today: date = Depends(get_today),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """This year's activities, distance totals and recent activities."""
    result = await service.get_year_activities(_parse_sport(sport), today)
    return result.to_dict()


@router.get("/goal")
async def get_goal_progress(
    goal: Optional[float] = Query(default=None, gt=0, description="Yearly goal in meters"),
    sport: str = Query(default="Run"),
    today: date = Depends(get_today),
    settings: Settings = Depends(get_settings),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Year-to-date progress and weekly targets for a yearly distance goal."""
    kind = _parse_sport(sport)
    yearly_goal = goal if goal is not None else settings.default_yearly_goal_m

    report = await service.get_goal_progress(yearly_goal, kind, today)
    result = report.to_dict()
    result["sport_config"] = get_sport_config(kind).to_dict()
    return result


@router.get("/historical")
async def get_historical(
    years: Optional[int] = Query(default=None, ge=1),
    sport: str = Query(default="Run"),
    today: date = Depends(get_today),
    settings: Settings = Depends(get_settings),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Per-year pace summaries with the year-over-year trend."""
    years = _check_years(years or settings.history_years, settings)
    report = await service.get_historical(_parse_sport(sport), years, today)
    return report.to_dict()


@router.get("/pace-analysis")
async def get_pace_analysis(
    years: Optional[int] = Query(default=None, ge=1),
    sport: str = Query(default="Run"),
    period: PeriodGranularity = Query(default=PeriodGranularity.MONTHLY),
    view: PaceView = Query(default=PaceView.METRIC),
    today: date = Depends(get_today),
    settings: Settings = Depends(get_settings),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Per-activity and per-period trends over the last few years."""
    years = _check_years(years or settings.pace_analysis_years, settings)
    report = await service.get_pace_analysis(_parse_sport(sport), years, period, view, today)
    return report.to_dict()


@router.get("/stats")
async def get_stats(
    athlete_id: str = Depends(get_athlete_id),
    service: DashboardService = Depends(get_dashboard_service),
) -> Dict[str, Any]:
    """Athlete profile with Strava's recent, year-to-date and all-time totals."""
    return await service.get_athlete_overview(athlete_id)
