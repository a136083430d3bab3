"""
Analytics rollups over habit completion dates: pure functions, no DB access.

Chart heights are percentages of the busiest bucket in the series. The
divisor is floored at 1 so an empty series gives all-zero heights.
"""
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Iterator

from .streak import parse_stamp, to_stamp

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass
class MonthStat:
    month_index: int
    name: str
    total_completed: int
    normalized_height: float


@dataclass
class WeekdayStat:
    day: str
    count: int
    normalized_height: float


def _completion_days(habits: list[dict]) -> Iterator[date]:
    """Every parseable completion date across all habits. Malformed stamps are skipped."""
    for habit in habits:
        for stamp in habit.get("completed_dates") or ():
            day = parse_stamp(stamp)
            if day is not None:
                yield day


def _normalize(values: list[int]) -> list[float]:
    peak = max(max(values, default=0), 1)
    return [v / peak * 100 for v in values]


def weekday_index(day: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return day.isoweekday() % 7


def daily_completions(habits: list[dict], year: int) -> dict[str, int]:
    first = date(year, 1, 1)
    days_in_year = (date(year, 12, 31) - first).days + 1
    counts = {to_stamp(first + timedelta(days=i)): 0 for i in range(days_in_year)}

    for day in _completion_days(habits):
        if day.year == year:
            counts[to_stamp(day)] += 1
    return counts


def monthly_stats(habits: list[dict], year: int) -> list[MonthStat]:
    totals = [0] * 12
    for day in _completion_days(habits):
        if day.year == year:
            totals[day.month - 1] += 1

    heights = _normalize(totals)
    return [
        MonthStat(month_index=i, name=MONTH_NAMES[i], total_completed=totals[i], normalized_height=heights[i])
        for i in range(12)
    ]


def weekday_stats(habits: list[dict]) -> list[WeekdayStat]:
    """Lifetime counts per weekday; not limited to any one year."""
    counts = [0] * 7
    for day in _completion_days(habits):
        counts[weekday_index(day)] += 1

    heights = _normalize(counts)
    return [
        WeekdayStat(day=WEEKDAY_NAMES[i], count=counts[i], normalized_height=heights[i])
        for i in range(7)
    ]


def yearly_total(habits: list[dict], year: int) -> int:
    return sum(1 for day in _completion_days(habits) if day.year == year)


def analytics_summary(habits: list[dict], year: int) -> dict:
    return {
        "year": year,
        "daily": daily_completions(habits, year),
        "monthly": [asdict(m) for m in monthly_stats(habits, year)],
        "weekday": [asdict(w) for w in weekday_stats(habits)],
        "yearly_total": yearly_total(habits, year),
    }
