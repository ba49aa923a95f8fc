"""Recorded activity as returned by the activity provider."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from ..utils.units import (
    meters_to_miles,
    mps_to_mph,
    pace_minutes_per_mile,
    pace_seconds_per_meter,
    speed_meters_per_second,
)


def _parse_timestamp(value: str, keep_zone: bool = True) -> datetime:
    """Parse a Strava ISO-8601 timestamp ('...Z').

    Strava's ``start_date_local`` carries a 'Z' suffix even though it is
    wall-clock time, so it is parsed naive when ``keep_zone`` is False.
    """
    if keep_zone:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.fromisoformat(value.rstrip("Z")).replace(tzinfo=None)


@dataclass(frozen=True)
class Activity:
    """A single recorded workout. Read-only for the lifetime of a request."""

    id: int
    name: str
    sport_type: str
    distance_m: float
    moving_time_sec: int
    start_date: datetime
    elapsed_time_sec: int = 0
    start_date_local: Optional[datetime] = None
    total_elevation_gain_m: Optional[float] = None
    average_heartrate: Optional[float] = None

    @property
    def local_start(self) -> datetime:
        """Naive start time on the athlete's wall clock, or in UTC when that is unknown."""
        if self.start_date_local is not None:
            return self.start_date_local
        if self.start_date.tzinfo is not None:
            return self.start_date.astimezone(timezone.utc).replace(tzinfo=None)
        return self.start_date

    @property
    def local_date(self) -> date:
        return self.local_start.date()

    @property
    def pace_sec_per_meter(self) -> float:
        return pace_seconds_per_meter(self.distance_m, self.moving_time_sec)

    @property
    def pace_min_per_mile(self) -> float:
        return pace_minutes_per_mile(self.distance_m, self.moving_time_sec)

    @property
    def speed_mps(self) -> float:
        return speed_meters_per_second(self.distance_m, self.moving_time_sec)

    @property
    def speed_mph(self) -> float:
        return mps_to_mph(self.speed_mps)

    @property
    def distance_miles(self) -> float:
        return meters_to_miles(self.distance_m)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "sport_type": self.sport_type,
            "distance": self.distance_m,
            "moving_time": self.moving_time_sec,
            "elapsed_time": self.elapsed_time_sec,
            "start_date": self.start_date.isoformat(),
            "start_date_local": self.start_date_local.isoformat() if self.start_date_local else None,
            "total_elevation_gain": self.total_elevation_gain_m,
            "average_heartrate": self.average_heartrate,
            "pace_min_per_mile": round(self.pace_min_per_mile, 3),
        }

    @classmethod
    def from_api_response(cls, data: dict) -> "Activity":
        """Parse from a Strava API v3 SummaryActivity.

        The legacy ``type`` field groups variants such as TrailRun under
        Run, so it is preferred over ``sport_type`` for filtering.
        """
        sport_type = data.get("type") or data.get("sport_type") or "Workout"
        local = data.get("start_date_local")

        return cls(
            id=data["id"],
            name=data.get("name", ""),
            sport_type=sport_type,
            distance_m=float(data.get("distance") or 0),
            moving_time_sec=int(data.get("moving_time") or 0),
            start_date=_parse_timestamp(data["start_date"]),
            elapsed_time_sec=int(data.get("elapsed_time") or 0),
            start_date_local=_parse_timestamp(local, keep_zone=False) if local else None,
            total_elevation_gain_m=data.get("total_elevation_gain"),
            average_heartrate=data.get("average_heartrate"),
        )
