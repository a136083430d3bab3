import pytest
from datetime import date
from kage.engine.analytics import (
    daily_completions, monthly_stats, weekday_stats, yearly_total,
    analytics_summary, weekday_index,
)

HABITS = [
    {"id": "a", "completed_dates": ["2024-01-01", "2024-01-02", "2024-03-15", "2023-12-31"]},
    {"id": "b", "completed_dates": ["2024-01-01", "2024-02-29", "2025-01-01"]},
    {"id": "c", "completed_dates": None},
    {"id": "d"},
]


class TestDailyCompletions:
    def test_leap_year_has_every_day(self):
        daily = daily_completions(HABITS, 2024)
        assert len(daily) == 366
        assert "2024-02-29" in daily

    def test_common_year_has_365_days(self):
        assert len(daily_completions([], 2023)) == 365

    def test_last_representable_year(self):
        daily = daily_completions([{"completed_dates": ["9999-12-31"]}], 9999)
        assert len(daily) == 365
        assert daily["9999-12-31"] == 1

    def test_counts_per_day(self):
        daily = daily_completions(HABITS, 2024)
        assert daily["2024-01-01"] == 2
        assert daily["2024-01-02"] == 1
        assert daily["2024-02-29"] == 1
        assert daily["2024-06-01"] == 0

    def test_other_years_excluded(self):
        daily = daily_completions(HABITS, 2024)
        assert "2023-12-31" not in daily
        assert "2025-01-01" not in daily
        assert sum(daily.values()) == 5

    def test_malformed_stamps_skipped(self):
        habits = [{"completed_dates": ["2024-01-01", "garbage", "2024-02-30"]}]
        assert sum(daily_completions(habits, 2024).values()) == 1


class TestMonthlyStats:
    def test_twelve_ordered_months(self):
        months = monthly_stats(HABITS, 2024)
        assert [m.month_index for m in months] == list(range(12))
        assert months[0].name == "Jan" and months[11].name == "Dec"

    def test_totals_and_heights(self):
        months = monthly_stats(HABITS, 2024)
        assert months[0].total_completed == 3
        assert months[1].total_completed == 1
        assert months[2].total_completed == 1
        assert months[0].normalized_height == 100
        assert months[1].normalized_height == pytest.approx(100 / 3)
        assert months[5].normalized_height == 0

    def test_busiest_month_is_exactly_100(self):
        habits = [{"completed_dates": ["2024-05-01", "2024-05-02", "2024-05-03", "2024-07-01"]}]
        heights = [m.normalized_height for m in monthly_stats(habits, 2024)]
        assert max(heights) == 100.0
        assert heights[4] == 100.0

    def test_empty_year_all_zero(self):
        months = monthly_stats(HABITS, 2010)
        assert all(m.total_completed == 0 and m.normalized_height == 0 for m in months)


class TestWeekdayStats:
    def test_sunday_first(self):
        assert [w.day for w in weekday_stats([])] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

    def test_weekday_index_convention(self):
        assert weekday_index(date(2024, 1, 7)) == 0   # Sunday
        assert weekday_index(date(2024, 1, 1)) == 1   # Monday
        assert weekday_index(date(2024, 1, 6)) == 6   # Saturday

    def test_counts_all_years(self):
        stats = weekday_stats(HABITS)
        assert sum(w.count for w in stats) == 7

    def test_buckets(self):
        stats = {w.day: w for w in weekday_stats(HABITS)}
        # 2024-01-01 Mon x2, 2024-01-02 Tue, 2024-03-15 Fri,
        # 2023-12-31 Sun, 2024-02-29 Thu, 2025-01-01 Wed
        assert stats["Mon"].count == 2
        assert stats["Mon"].normalized_height == 100
        assert stats["Sun"].count == 1
        assert stats["Sun"].normalized_height == 50
        assert stats["Sat"].count == 0

    def test_no_completions_no_division_fault(self):
        assert all(w.normalized_height == 0 for w in weekday_stats([{"completed_dates": []}]))


class TestYearlyTotal:
    def test_only_target_year(self):
        assert yearly_total(HABITS, 2024) == 5
        assert yearly_total(HABITS, 2023) == 1
        assert yearly_total(HABITS, 2025) == 1

    def test_no_habits(self):
        assert yearly_total([], 2024) == 0


class TestSummary:
    def test_bundles_all_rollups(self):
        summary = analytics_summary(HABITS, 2024)
        assert summary["year"] == 2024
        assert summary["yearly_total"] == 5
        assert len(summary["daily"]) == 366
        assert len(summary["monthly"]) == 12
        assert summary["monthly"][0] == {
            "month_index": 0, "name": "Jan", "total_completed": 3, "normalized_height": 100.0,
        }
        assert len(summary["weekday"]) == 7
