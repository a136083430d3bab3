"""
Streak tracking: pure functions, no DB access.
"""
from datetime import date, timedelta
from typing import Iterable

STAMP_FORMAT = "%Y-%m-%d"


def to_stamp(day: date) -> str:
    return day.strftime(STAMP_FORMAT)


def parse_stamp(stamp: str | None) -> date | None:
    """Parse a yyyy-MM-dd stamp. Returns None for anything malformed."""
    if not stamp or not isinstance(stamp, str) or len(stamp) != 10:
        return None
    try:
        return date.fromisoformat(stamp)
    except ValueError:
        return None


def compute_streak(completed_dates: Iterable[str] | None, today: date) -> int:
    """
    Consecutive days ending today, or yesterday when today isn't marked yet.
    A missing or empty date set is a zero streak.
    """
    completed = set(completed_dates or ())
    if not completed:
        return 0

    yesterday = today - timedelta(days=1)
    if to_stamp(today) in completed:
        cursor = today
    elif to_stamp(yesterday) in completed:
        cursor = yesterday
    else:
        return 0

    streak = 0
    while to_stamp(cursor) in completed:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def toggle_date(completed_dates: Iterable[str] | None, stamp: str) -> list[str]:
    """Flip membership of stamp. Returns a new list with no duplicates."""
    dates = list(dict.fromkeys(completed_dates or ()))
    if stamp in dates:
        dates.remove(stamp)
    else:
        dates.append(stamp)
    return dates


def stale_streaks(habits: list[dict], today: date) -> dict[str, int]:
    """
    Map habit id -> corrected streak for every habit whose cached streak
    no longer matches its completion dates (e.g. days passed without a toggle).
    """
    stale: dict[str, int] = {}
    for habit in habits:
        actual = compute_streak(habit.get("completed_dates"), today)
        if (habit.get("streak") or 0) != actual:
            stale[habit["id"]] = actual
    return stale
