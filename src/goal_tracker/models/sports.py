"""
Sport configuration.

Running is judged by pace (lower is better), cycling by speed (higher
is better). Which way a trend counts as improvement is decided here and
nowhere else.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class SportKind(str, Enum):
    """Sports the dashboard tracks, valued as Strava activity types."""

    RUN = "Run"
    RIDE = "Ride"

    @classmethod
    def from_string(cls, s: str) -> Optional["SportKind"]:
        """Parse a sport from a Strava type or a friendly name."""
        mapping = {
            "run": cls.RUN,
            "running": cls.RUN,
            "ride": cls.RIDE,
            "cycling": cls.RIDE,
            "bike": cls.RIDE,
        }
        return mapping.get(s.strip().lower())


class MetricKind(str, Enum):
    """How a sport's effort is expressed."""

    PACE = "pace"     # time per distance, lower is better
    SPEED = "speed"   # distance per time, higher is better


class TrendDirection(str, Enum):
    """Direction labels for a fitted trendline."""

    IMPROVING = "improving"
    DECLINING = "declining"
    INCREASING = "increasing"
    DECREASING = "decreasing"


@dataclass(frozen=True)
class SportConfig:
    """Display and analysis settings for one sport."""

    kind: SportKind
    name: str
    icon: str
    metric: MetricKind
    goal_ranges: Tuple[int, ...]   # yearly goal presets, miles

    def to_dict(self) -> Dict[str, object]:
        return {
            "sport": self.kind.value,
            "name": self.name,
            "icon": self.icon,
            "metric": self.metric.value,
            "goal_ranges": list(self.goal_ranges),
        }


SPORT_CONFIG: Dict[SportKind, SportConfig] = {
    SportKind.RUN: SportConfig(
        kind=SportKind.RUN,
        name="Running",
        icon="🏃",
        metric=MetricKind.PACE,
        goal_ranges=(200, 250, 300, 365, 400, 500, 750, 1000),
    ),
    SportKind.RIDE: SportConfig(
        kind=SportKind.RIDE,
        name="Cycling",
        icon="🚴",
        metric=MetricKind.SPEED,
        goal_ranges=(1000, 1500, 2000, 3000, 4000, 5000, 6000, 8000),
    ),
}


def get_sport_config(sport: SportKind) -> SportConfig:
    return SPORT_CONFIG[sport]


def list_sport_configs() -> List[SportConfig]:
    return list(SPORT_CONFIG.values())


def is_improving(metric: MetricKind, slope: float) -> bool:
    """Whether a trend slope means the athlete is getting better."""
    if metric == MetricKind.PACE:
        return slope < 0
    return slope > 0


def performance_direction(metric: MetricKind, slope: float) -> TrendDirection:
    """Label a pace or speed trend as improving or declining."""
    if is_improving(metric, slope):
        return TrendDirection.IMPROVING
    return TrendDirection.DECLINING


def volume_direction(slope: float) -> TrendDirection:
    """Label a distance trend as increasing or decreasing."""
    if slope > 0:
        return TrendDirection.INCREASING
    return TrendDirection.DECREASING
