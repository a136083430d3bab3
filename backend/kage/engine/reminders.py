"""
Dashboard progress and evening reminder rules: pure functions, no DB access.
"""
from datetime import datetime

# Local hours (inclusive) during which a pending-habit nudge may be sent.
NUDGE_START_HOUR = 18
NUDGE_END_HOUR = 21


def daily_progress(habits: list[dict], tasks: list[dict], stamp: str) -> dict:
    done = [h for h in habits if stamp in (h.get("completed_dates") or ())]
    pending = [h for h in habits if stamp not in (h.get("completed_dates") or ())]
    total = len(habits)
    return {
        "date": stamp,
        "habits_completed": len(done),
        "habits_total": total,
        "percent": len(done) / total * 100 if total else 0.0,
        "pending_habits": [{"id": h.get("id"), "name": h.get("name")} for h in pending],
        "pending_tasks": sum(1 for t in tasks if not t.get("completed")),
    }


def should_nudge(settings: dict | None, pending_habits: int, now: datetime) -> bool:
    if (settings or {}).get("notifications") is False:
        return False
    if pending_habits <= 0:
        return False
    return NUDGE_START_HOUR <= now.hour <= NUDGE_END_HOUR
