"""Shared fixtures for the goal tracker tests."""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pytest

from goal_tracker.config import Settings
from goal_tracker.integrations.base import IntegrationError
from goal_tracker.models.activity import Activity


def build_activity(
    id: int = 1,
    start: datetime = datetime(2024, 1, 5, 7, 30),
    distance_m: float = 5000.0,
    moving_time_sec: int = 1500,
    sport_type: str = "Run",
    name: Optional[str] = None,
) -> Activity:
    return Activity(
        id=id,
        name=name or f"Activity {id}",
        sport_type=sport_type,
        distance_m=distance_m,
        moving_time_sec=moving_time_sec,
        start_date=start,
        elapsed_time_sec=moving_time_sec,
        start_date_local=start,
    )


class FakeActivitySource:
    """In-memory activity source keyed by calendar year."""

    def __init__(
        self,
        activities: Iterable[Activity] = (),
        failing_years: Iterable[int] = (),
        error: Optional[Exception] = None,
        athlete: Optional[Dict[str, Any]] = None,
        stats: Optional[Dict[str, Any]] = None,
    ):
        self.activities = list(activities)
        self.failing_years = set(failing_years)
        self.error = error
        self.athlete = athlete or {"id": 42, "firstname": "Test", "lastname": "Athlete"}
        self.stats = stats or {"ytd_run_totals": {"count": 3, "distance": 15000.0}}
        self.requested_years: List[int] = []
        self.stats_athlete_id: Optional[str] = None

    async def list_activities(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Activity]:
        year = start_date.year
        self.requested_years.append(year)
        if year in self.failing_years:
            raise self.error or IntegrationError("Strava API error: boom", "strava", "500")
        return [
            a for a in self.activities
            if start_date <= a.local_start <= end_date
        ]

    async def get_athlete(self) -> Dict[str, Any]:
        return self.athlete

    async def get_athlete_stats(self, athlete_id: Optional[str] = None) -> Dict[str, Any]:
        self.stats_athlete_id = athlete_id
        return self.stats


@pytest.fixture
def make_activity():
    """Factory for Activity objects with sensible run defaults."""
    return build_activity


@pytest.fixture
def fake_source_class():
    """The in-memory ActivitySource used by service and API tests."""
    return FakeActivitySource


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)
