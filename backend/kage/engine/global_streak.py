"""
Global streak (70% rule): pure functions, no DB access.

A day counts toward the user's global streak when at least 70% of their
habits were completed on it. The caller re-reads every habit after a toggle
and feeds the fresh list in here; nothing is maintained incrementally.
"""
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable

VALID_DAY_THRESHOLD = Fraction(7, 10)


@dataclass(frozen=True)
class DayEvaluation:
    date: str
    completed: int
    total: int
    is_valid_day: bool


def evaluate_day(habits: list[dict], stamp: str) -> DayEvaluation | None:
    """Returns None for a user with no habits: the day is not evaluated."""
    total = len(habits)
    if total == 0:
        return None
    completed = sum(1 for h in habits if stamp in (h.get("completed_dates") or ()))
    return DayEvaluation(
        date=stamp,
        completed=completed,
        total=total,
        is_valid_day=Fraction(completed, total) >= VALID_DAY_THRESHOLD,
    )


def update_valid_dates(current: Iterable[str] | None, stamp: str, is_valid_day: bool) -> list[str]:
    dates = set(current or ())
    if is_valid_day:
        dates.add(stamp)
    else:
        dates.discard(stamp)
    return sorted(dates)


def rebuild_valid_dates(habits: list[dict]) -> list[str]:
    """Re-derive every valid day from scratch against the current habit list."""
    stamps = {s for h in habits for s in (h.get("completed_dates") or ())}
    valid = []
    for stamp in sorted(stamps):
        evaluation = evaluate_day(habits, stamp)
        if evaluation and evaluation.is_valid_day:
            valid.append(stamp)
    return valid
