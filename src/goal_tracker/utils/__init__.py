"""Utility modules for the goal tracker."""

from .units import (
    DistanceUnit,
    METERS_PER_MILE,
    MILES_PER_METER,
    meters_to_miles,
    meters_to_kilometers,
    miles_to_meters,
    format_distance,
    format_pace,
    format_speed,
    pace_seconds_per_meter,
    pace_minutes_per_mile,
    convert_pace_to_minutes_per_mile,
    convert_pace_to_minutes_per_km,
)
from .log_sanitizer import (
    LogSanitizationFilter,
    install_log_sanitizer,
    sanitize_string,
)

__all__ = [
    "DistanceUnit",
    "METERS_PER_MILE",
    "MILES_PER_METER",
    "meters_to_miles",
    "meters_to_kilometers",
    "miles_to_meters",
    "format_distance",
    "format_pace",
    "format_speed",
    "pace_seconds_per_meter",
    "pace_minutes_per_mile",
    "convert_pace_to_minutes_per_mile",
    "convert_pace_to_minutes_per_km",
    "LogSanitizationFilter",
    "install_log_sanitizer",
    "sanitize_string",
]
