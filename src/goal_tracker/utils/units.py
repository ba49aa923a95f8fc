"""
Distance, pace and speed conversions.

Strava reports distance in meters and time in seconds. Everything the
engine computes stays in those units; these helpers convert at the
edges and format values for display. Zero distance or zero speed yields
a zero/placeholder value instead of dividing by zero.
"""

from enum import Enum
from typing import Union


MILES_PER_METER = 0.000621371
METERS_PER_MILE = 1609.34
METERS_PER_KILOMETER = 1000.0
SECONDS_PER_HOUR = 3600.0


class DistanceUnit(str, Enum):
    """Display unit for distances and paces."""

    MILES = "mi"
    KILOMETERS = "km"


UnitLike = Union[DistanceUnit, str]


def _unit(unit: UnitLike) -> DistanceUnit:
    return unit if isinstance(unit, DistanceUnit) else DistanceUnit(unit)


def _meters_per_unit(unit: UnitLike) -> float:
    return METERS_PER_MILE if _unit(unit) == DistanceUnit.MILES else METERS_PER_KILOMETER


# =============================================================================
# Distance
# =============================================================================


def meters_to_miles(meters: float) -> float:
    return meters * MILES_PER_METER


def meters_to_kilometers(meters: float) -> float:
    return meters / METERS_PER_KILOMETER


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE


def kilometers_to_meters(kilometers: float) -> float:
    return kilometers * METERS_PER_KILOMETER


def convert_distance(meters: float, unit: UnitLike = DistanceUnit.MILES) -> float:
    """Convert meters to the requested display unit."""
    if _unit(unit) == DistanceUnit.MILES:
        return meters_to_miles(meters)
    return meters_to_kilometers(meters)


def format_distance(meters: float, unit: UnitLike = DistanceUnit.MILES) -> str:
    """Format meters as e.g. '6.21 mi' or '10.00 km'."""
    unit = _unit(unit)
    return f"{convert_distance(meters, unit):.2f} {unit.value}"


# =============================================================================
# Pace
# =============================================================================


def pace_seconds_per_meter(distance_m: float, moving_time_sec: float) -> float:
    """Pace as seconds per meter, 0 when either distance or time is zero."""
    if distance_m <= 0 or moving_time_sec <= 0:
        return 0.0
    return moving_time_sec / distance_m


def pace_minutes_per_mile(distance_m: float, moving_time_sec: float) -> float:
    """Pace as minutes per mile, 0 when either distance or time is zero."""
    if distance_m <= 0 or moving_time_sec <= 0:
        return 0.0
    return (moving_time_sec / 60) / meters_to_miles(distance_m)


def convert_pace_to_minutes_per_mile(seconds_per_meter: float) -> float:
    if seconds_per_meter == 0:
        return 0.0
    return (seconds_per_meter * METERS_PER_MILE) / 60


def convert_pace_to_minutes_per_km(seconds_per_meter: float) -> float:
    if seconds_per_meter == 0:
        return 0.0
    return (seconds_per_meter * METERS_PER_KILOMETER) / 60


def convert_pace(seconds_per_meter: float, unit: UnitLike = DistanceUnit.MILES) -> float:
    """Convert seconds-per-meter pace to minutes per display unit."""
    if _unit(unit) == DistanceUnit.MILES:
        return convert_pace_to_minutes_per_mile(seconds_per_meter)
    return convert_pace_to_minutes_per_km(seconds_per_meter)


def format_pace(meters_per_second: float, unit: UnitLike = DistanceUnit.MILES) -> str:
    """Format a speed in m/s as pace 'M:SS' per mile or km."""
    if meters_per_second == 0:
        return "0:00"

    seconds_per_unit = _meters_per_unit(unit) / meters_per_second
    minutes = int(seconds_per_unit // 60)
    seconds = int(seconds_per_unit % 60)
    return f"{minutes}:{seconds:02d}"


def format_pace_minutes(minutes_per_unit: float, unit: UnitLike = DistanceUnit.MILES) -> str:
    """Format a decimal minutes-per-unit pace as 'M:SS /mi'."""
    if minutes_per_unit == 0:
        return "0:00"

    minutes = int(minutes_per_unit)
    seconds = round((minutes_per_unit - minutes) * 60)
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d} /{_unit(unit).value}"


def format_pace_time(pace: float) -> str:
    """Format a decimal minutes pace as 'M:SS' with no unit suffix."""
    minutes = int(pace)
    seconds = round((pace - minutes) * 60)
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"


# =============================================================================
# Speed
# =============================================================================


def speed_meters_per_second(distance_m: float, moving_time_sec: float) -> float:
    if distance_m <= 0 or moving_time_sec <= 0:
        return 0.0
    return distance_m / moving_time_sec


def mps_to_mph(meters_per_second: float) -> float:
    return (meters_per_second * SECONDS_PER_HOUR) / METERS_PER_MILE


def mps_to_kph(meters_per_second: float) -> float:
    return (meters_per_second * SECONDS_PER_HOUR) / METERS_PER_KILOMETER


def convert_speed(meters_per_second: float, unit: UnitLike = DistanceUnit.MILES) -> float:
    """Convert m/s to mph or kph."""
    if _unit(unit) == DistanceUnit.MILES:
        return mps_to_mph(meters_per_second)
    return mps_to_kph(meters_per_second)


def format_speed(meters_per_second: float, unit: UnitLike = DistanceUnit.MILES) -> str:
    """Format m/s as mph/kph with one decimal."""
    if meters_per_second == 0:
        return "0.0"
    return f"{convert_speed(meters_per_second, unit):.1f}"


# =============================================================================
# Time
# =============================================================================


def format_time(seconds: int) -> str:
    """Format seconds as H:MM:SS or MM:SS string."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"
