"""
Trendline Estimation

Ordinary least-squares lines over pace, speed or distance samples.
Samples are indexed 0..n-1 by default, so unevenly spaced samples
count equally; `fit_trendline_by_date` weights by elapsed days instead.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union


@dataclass(frozen=True)
class TrendLine:
    """A fitted line y = slope * x + intercept."""

    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "slope": self.slope,
            "intercept": self.intercept,
        }


FLAT_LINE = TrendLine(slope=0.0, intercept=0.0)


def fit_trendline(
    values: Sequence[float],
    x_values: Optional[Sequence[float]] = None,
) -> TrendLine:
    """
    Fit an ordinary least-squares line.

    Args:
        values: Dependent values in order
        x_values: Independent values; defaults to the indices 0..n-1

    Returns:
        TrendLine. Fewer than two points give a flat line at zero.
    """
    n = len(values)
    if n < 2:
        return FLAT_LINE

    xs = list(x_values) if x_values is not None else list(range(n))
    if len(xs) != n:
        raise ValueError(f"Expected {n} x values, got {len(xs)}")

    sum_x = sum(xs)
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in zip(xs, values))
    sum_xx = sum(x * x for x in xs)

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        # Every sample shares one x
        return TrendLine(slope=0.0, intercept=sum_y / n)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return TrendLine(slope=slope, intercept=intercept)


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def fit_trendline_by_date(
    dates: Sequence[Union[date, datetime]],
    values: Sequence[float],
) -> TrendLine:
    """Fit a line with x = days since the first sample, so gaps weigh in."""
    if len(dates) != len(values):
        raise ValueError(f"Expected {len(values)} dates, got {len(dates)}")
    return fit_trendline(values, days_since_first(dates))


def days_since_first(dates: Sequence[Union[date, datetime]]) -> List[int]:
    if not dates:
        return []
    first = _as_date(dates[0])
    return [(_as_date(d) - first).days for d in dates]


def trend_points(line: TrendLine, x_values: Sequence[float]) -> List[float]:
    """Predicted values at each x, for plotting beside the samples."""
    return [line.predict(x) for x in x_values]
