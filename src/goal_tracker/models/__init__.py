"""Domain models for the goal tracker."""

from .activity import Activity
from .sports import (
    MetricKind,
    SportConfig,
    SportKind,
    SPORT_CONFIG,
    TrendDirection,
    get_sport_config,
    is_improving,
    list_sport_configs,
    performance_direction,
    volume_direction,
)

__all__ = [
    "Activity",
    "MetricKind",
    "SportConfig",
    "SportKind",
    "SPORT_CONFIG",
    "TrendDirection",
    "get_sport_config",
    "is_improving",
    "list_sport_configs",
    "performance_direction",
    "volume_direction",
]
