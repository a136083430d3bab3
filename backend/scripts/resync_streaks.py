"""
Resync cached streaks for a user from their stored completion dates.

Recomputes every habit's streak, re-derives the valid global-streak days from
all habits (70% rule against the current habit list) and the global streak.
Safe to run multiple times (idempotent).

Usage:
    cd backend
    SUPABASE_URL=... SUPABASE_SERVICE_KEY=... python scripts/resync_streaks.py <uid>

Or with a .env file:
    python scripts/resync_streaks.py <uid> [--dry-run]
"""
import os
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# Add project root to path so we can import engine modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kage.engine.streak import compute_streak, stale_streaks
from kage.engine.global_streak import rebuild_valid_dates
from kage.db import get_client, get_user, get_habits, update_habit, update_user


def compute_resync(habits: list[dict], today: date) -> dict:
    """Return the corrected streak values to write for one user."""
    valid_dates = rebuild_valid_dates(habits)
    return {
        "habit_streaks": stale_streaks(habits, today),
        "valid_streak_dates": valid_dates,
        "global_streak": compute_streak(valid_dates, today),
    }


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    dry_run = "--dry-run" in sys.argv
    if len(args) != 1:
        print(__doc__)
        sys.exit(1)
    uid = args[0]

    db = get_client()
    user = get_user(db, uid)
    if not user:
        print(f"User {uid} not found")
        sys.exit(1)

    habits = get_habits(db, uid)
    print(f"Resyncing {uid[:8]}... ({len(habits)} habits)")
    result = compute_resync(habits, date.today())

    for habit_id, streak in result["habit_streaks"].items():
        print(f"  habit {habit_id}: streak -> {streak}")
    print(f"  valid days: {len(user.get('valid_streak_dates') or [])} -> {len(result['valid_streak_dates'])}")
    print(f"  global streak: {user.get('global_streak') or 0} -> {result['global_streak']}")

    if dry_run:
        print("Dry run, nothing written.")
        return

    for habit_id, streak in result["habit_streaks"].items():
        update_habit(db, habit_id, {"streak": streak})
    update_user(db, uid, {
        "valid_streak_dates": result["valid_streak_dates"],
        "global_streak": result["global_streak"],
    })
    print("Done.")


if __name__ == "__main__":
    main()
