"""Tests for yearly summaries and year-over-year analysis."""

from datetime import datetime
from types import SimpleNamespace

import pytest

from goal_tracker.analysis.history import (
    DISTANCE_RANGES,
    analyze_year_over_year,
    calculate_pace_improvement,
    distance_range_label,
    empty_year_summary,
    find_best_and_worst_years,
    summarize_year,
)
from goal_tracker.utils.units import convert_pace_to_minutes_per_mile


def year_pace(year, average_pace):
    return SimpleNamespace(year=year, average_pace=average_pace)


class TestSummarizeYear:
    """Tests for per-year summaries."""

    @pytest.fixture
    def runs(self, make_activity):
        return [
            make_activity(id=1, start=datetime(2024, 2, 1), distance_m=3000, moving_time_sec=900),
            make_activity(id=2, start=datetime(2024, 3, 1), distance_m=8000, moving_time_sec=2400),
            make_activity(id=3, start=datetime(2024, 4, 1), distance_m=15000, moving_time_sec=4500),
            make_activity(id=4, start=datetime(2024, 5, 1), distance_m=42195, moving_time_sec=12000),
        ]

    def test_totals(self, runs):
        summary = summarize_year(2024, runs)

        assert summary.year == 2024
        assert summary.total_runs == 4
        assert summary.total_distance == 68195
        assert summary.total_time == 19800
        assert summary.average_pace == pytest.approx(19800 / 68195)
        assert summary.has_data

    def test_range_analysis(self, runs):
        ranges = summarize_year(2024, runs).range_analysis

        assert set(ranges) == {"short", "medium", "long", "ultra_long"}
        assert all(stats.count == 1 for stats in ranges.values())
        assert ranges["ultra_long"].average_pace == pytest.approx(12000 / 42195)
        assert ranges["short"].total_distance == 3000

    def test_range_boundaries(self, make_activity):
        """Lower bounds are inclusive."""
        runs = [
            make_activity(id=1, distance_m=4999.9),
            make_activity(id=2, distance_m=5000),
            make_activity(id=3, distance_m=10000),
            make_activity(id=4, distance_m=21097),
        ]

        ranges = summarize_year(2024, runs).range_analysis

        assert [ranges[r.key].count for r in DISTANCE_RANGES] == [1, 1, 1, 1]

    def test_range_pace_is_time_over_distance(self, make_activity):
        runs = [
            make_activity(id=1, distance_m=1000, moving_time_sec=400),
            make_activity(id=2, distance_m=3000, moving_time_sec=900),
        ]

        stats = summarize_year(2024, runs).range_analysis["short"]

        assert stats.count == 2
        assert stats.average_pace == pytest.approx(1300 / 4000)

    def test_empty_summary(self):
        summary = empty_year_summary(2021)

        assert summary.year == 2021
        assert summary.total_runs == 0
        assert summary.total_distance == 0
        assert summary.average_pace == 0
        assert not summary.has_data
        assert all(stats.count == 0 for stats in summary.range_analysis.values())
        assert all(stats.average_pace == 0 for stats in summary.range_analysis.values())

    def test_serialization(self, runs):
        summary = summarize_year(2024, runs)

        data = summary.to_dict()
        assert data["year"] == 2024
        assert data["range_analysis"]["medium"]["count"] == 1
        assert data["average_pace_min_per_mile"] == pytest.approx(
            convert_pace_to_minutes_per_mile(19800 / 68195), abs=1e-3
        )
        assert "activities" not in data
        assert len(summary.to_dict(include_activities=True)["activities"]) == 4

    def test_range_labels(self):
        assert distance_range_label("ultra_long") == "Ultra Long (Half+)"
        assert distance_range_label("unknown") == "unknown"


class TestYearOverYear:
    """Tests for the regression across years."""

    def test_single_year_has_no_trend(self):
        assert analyze_year_over_year([year_pace(2022, 6.0)]) is None
        assert analyze_year_over_year([]) is None

    def test_faster_pace_is_improving(self):
        trend = analyze_year_over_year([year_pace(2022, 6.0), year_pace(2023, 5.5)])

        assert trend.is_improving
        assert trend.slope == pytest.approx(-0.5)

    def test_slower_pace_is_declining(self):
        trend = analyze_year_over_year([year_pace(2022, 5.5), year_pace(2023, 6.0)])

        assert not trend.is_improving
        assert trend.slope > 0

    def test_sorted_by_year(self):
        """Input order does not change the fit."""
        ordered = analyze_year_over_year(
            [year_pace(2021, 6.2), year_pace(2022, 6.0), year_pace(2023, 5.9)]
        )
        shuffled = analyze_year_over_year(
            [year_pace(2023, 5.9), year_pace(2021, 6.2), year_pace(2022, 6.0)]
        )

        assert shuffled.slope == pytest.approx(ordered.slope)
        assert shuffled.is_improving

    def test_works_on_summaries(self, make_activity):
        older = summarize_year(2023, [make_activity(id=1, distance_m=5000, moving_time_sec=1600)])
        newer = summarize_year(2024, [make_activity(id=2, distance_m=5000, moving_time_sec=1500)])

        trend = analyze_year_over_year([newer, older])

        assert trend.is_improving
        assert trend.to_dict()["is_improving"] is True


class TestBestAndWorstYears:
    """Tests for picking the fastest and slowest years."""

    def test_all_zero(self):
        assert find_best_and_worst_years([year_pace(2022, 0), year_pace(2023, 0)]) == (None, None)

    def test_empty(self):
        assert find_best_and_worst_years([]) == (None, None)

    def test_ignores_years_without_pace(self):
        years = [year_pace(2021, 0), year_pace(2022, 6.0), year_pace(2023, 5.5)]

        best, worst = find_best_and_worst_years(years)

        assert best.year == 2023
        assert worst.year == 2022

    def test_single_year_is_both(self):
        only = year_pace(2024, 5.0)
        assert find_best_and_worst_years([only]) == (only, only)


class TestPaceImprovement:
    """Tests for percent improvement."""

    def test_faster_is_positive(self):
        assert calculate_pace_improvement(6.0, 5.4) == pytest.approx(10.0)

    def test_slower_is_negative(self):
        assert calculate_pace_improvement(5.0, 5.5) == pytest.approx(-10.0)

    def test_zero_pace(self):
        assert calculate_pace_improvement(0, 5.0) == 0.0
        assert calculate_pace_improvement(5.0, 0) == 0.0
