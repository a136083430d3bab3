"""
Kage: FastAPI backend
"""
import logging
import os
from datetime import date, datetime, timezone
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .db import (
    get_client, get_user, insert_user, update_user, delete_user,
    get_habits, get_habit, insert_habit, update_habit, delete_habit,
    get_tasks, get_task, insert_task, update_task, delete_task,
)
from .engine.streak import compute_streak, toggle_date, stale_streaks, to_stamp
from .engine.global_streak import evaluate_day, update_valid_dates
from .engine.analytics import analytics_summary
from .engine.tasks import TaskFilter, filter_tasks, sort_tasks
from .engine.reminders import daily_progress, should_nudge
from .models import (
    UserRegister, ProfilePatch, SettingsPatch,
    HabitCreate, HabitToggle, TaskCreate, TaskPatch,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="Kage API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
] + [o.strip() for o in os.environ.get("KAGE_ALLOWED_ORIGINS", "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

DEFAULT_SETTINGS = {"theme": "dark", "notifications": True}


def _today() -> date:
    """Local calendar date of this process. Read once per request."""
    return date.today()


def _now() -> datetime:
    return datetime.now()


@app.get("/health")
def health():
    try:
        db = get_client()
        db.table("users").select("uid").limit(1).execute()
        return {"status": "ok", "db": "ok"}
    except Exception as e:
        logger.error("Health check DB failure: %s", e)
        raise HTTPException(status_code=503, detail="DB unavailable")


# ── Auth ──────────────────────────────────────────────────────────────────────

def get_uid(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    return authorization.removeprefix("Bearer ").strip()


def require_user(uid: str = Depends(get_uid)) -> dict:
    db = get_client()
    user = get_user(db, uid)
    if not user:
        raise HTTPException(status_code=404, detail="User not registered")
    return user


# ── Account ───────────────────────────────────────────────────────────────────

@app.post("/api/users", status_code=201)
@limiter.limit("10/minute")
def register_user(request: Request, body: UserRegister):
    db = get_client()
    if get_user(db, body.uid):
        return {"status": "already_registered"}
    insert_user(db, {
        "uid": body.uid,
        "display_name": body.display_name,
        "email": body.email,
        "settings": dict(DEFAULT_SETTINGS),
        "valid_streak_dates": [],
        "global_streak": 0,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    logger.info("User registered: %s", body.uid[:8])
    return {"status": "registered"}


@app.get("/api/me")
def get_me(user: dict = Depends(require_user)):
    db = get_client()
    uid = user["uid"]
    now = _now()
    today = now.date()
    stamp = to_stamp(today)
    habits = get_habits(db, uid)
    tasks = get_tasks(db, uid)
    settings = {**DEFAULT_SETTINGS, **(user.get("settings") or {})}
    progress = daily_progress(habits, tasks, stamp)

    return {
        "uid": uid,
        "display_name": user.get("display_name"),
        "email": user.get("email"),
        "settings": settings,
        "global_streak": compute_streak(user.get("valid_streak_dates"), today),
        "today": progress,
        "nudge": should_nudge(settings, len(progress["pending_habits"]), now),
        "member_since": user.get("created_at", ""),
    }


@app.patch("/api/me")
def update_me(body: ProfilePatch, user: dict = Depends(require_user)):
    db = get_client()
    update_user(db, user["uid"], {"display_name": body.display_name})
    return {"status": "updated"}


@app.patch("/api/me/settings")
def update_settings(body: SettingsPatch, user: dict = Depends(require_user)):
    changes = body.model_dump(exclude_none=True)
    settings = {**DEFAULT_SETTINGS, **(user.get("settings") or {}), **changes}
    if changes:
        db = get_client()
        update_user(db, user["uid"], {"settings": settings})
    return {"status": "updated", "settings": settings}


@app.delete("/api/me", status_code=200)
def delete_me(user: dict = Depends(require_user)):
    db = get_client()
    delete_user(db, user["uid"])
    logger.info("User deleted: %s...", user["uid"][:8])
    return {"status": "deleted", "message": "All your data has been permanently deleted."}


# ── Habits ────────────────────────────────────────────────────────────────────

@app.get("/api/habits")
def list_habits(user: dict = Depends(require_user)):
    db = get_client()
    return {"habits": get_habits(db, user["uid"])}


@app.post("/api/habits", status_code=201)
@limiter.limit("30/minute")
def create_habit(request: Request, body: HabitCreate, user: dict = Depends(require_user)):
    db = get_client()
    habit = insert_habit(db, {
        "user_id": user["uid"],
        "name": body.name,
        "icon": body.icon,
        "daily_goal": body.daily_goal,
        "streak": 0,
        "completed_dates": [],
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    return {"status": "created", "habit": habit}


@app.post("/api/habits/sync")
def sync_streaks(user: dict = Depends(require_user)):
    """Rewrite cached streaks that decayed because days passed without a toggle."""
    db = get_client()
    uid = user["uid"]
    today = _today()

    stale = stale_streaks(get_habits(db, uid), today)
    for habit_id, streak in stale.items():
        update_habit(db, habit_id, {"streak": streak})

    global_streak = compute_streak(user.get("valid_streak_dates"), today)
    if global_streak != (user.get("global_streak") or 0):
        update_user(db, uid, {"global_streak": global_streak})

    if stale:
        logger.info("Synced %d habit streaks for %s...", len(stale), uid[:8])
    return {"status": "ok", "updated": stale, "global_streak": global_streak}


@app.post("/api/habits/{habit_id}/toggle")
@limiter.limit("60/minute")
def toggle_habit(request: Request, habit_id: str, body: HabitToggle, user: dict = Depends(require_user)):
    db = get_client()
    uid = user["uid"]
    habit = get_habit(db, uid, habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail="Habit not found")

    today = _today()
    stamp = body.date or to_stamp(today)
    completed_dates = toggle_date(habit.get("completed_dates"), stamp)
    streak = compute_streak(completed_dates, today)
    update_habit(db, habit_id, {"completed_dates": completed_dates, "streak": streak})

    global_state = _update_global_streak(db, user, stamp, today)

    return {
        "status": "ok",
        "date": stamp,
        "completed": stamp in completed_dates,
        "streak": streak,
        **global_state,
    }


@app.delete("/api/habits/{habit_id}")
def remove_habit(habit_id: str, user: dict = Depends(require_user)):
    db = get_client()
    if not get_habit(db, user["uid"], habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    delete_habit(db, user["uid"], habit_id)
    return {"status": "deleted"}


# ── Tasks ─────────────────────────────────────────────────────────────────────

@app.get("/api/tasks")
def list_tasks(status: TaskFilter = Query("all"), user: dict = Depends(require_user)):
    db = get_client()
    tasks = get_tasks(db, user["uid"])
    return {"tasks": sort_tasks(filter_tasks(tasks, status))}


@app.post("/api/tasks", status_code=201)
@limiter.limit("30/minute")
def create_task(request: Request, body: TaskCreate, user: dict = Depends(require_user)):
    db = get_client()
    task = insert_task(db, {
        "user_id": user["uid"],
        "title": body.title,
        "description": body.description,
        "priority": body.priority.value,
        "due_date": body.due_date.isoformat() if body.due_date else None,
        "completed": False,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })
    return {"status": "created", "task": task}


@app.patch("/api/tasks/{task_id}")
def set_task_completed(task_id: str, body: TaskPatch, user: dict = Depends(require_user)):
    db = get_client()
    if not get_task(db, user["uid"], task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    update_task(db, task_id, {"completed": body.completed})
    return {"status": "updated", "completed": body.completed}


@app.delete("/api/tasks/{task_id}")
def remove_task(task_id: str, user: dict = Depends(require_user)):
    db = get_client()
    if not get_task(db, user["uid"], task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    delete_task(db, user["uid"], task_id)
    return {"status": "deleted"}


# ── Analytics ─────────────────────────────────────────────────────────────────

@app.get("/api/analytics")
@limiter.limit("30/minute")
def get_analytics(request: Request, year: int | None = Query(None, ge=1970, le=9999), user: dict = Depends(require_user)):
    db = get_client()
    today = _today()
    habits = get_habits(db, user["uid"])
    return {
        **analytics_summary(habits, year or today.year),
        "global_streak": compute_streak(user.get("valid_streak_dates"), today),
    }


# ── Helpers ───────────────────────────────────────────────────────────────────

def _update_global_streak(db, user: dict, stamp: str, today: date) -> dict[str, Any]:
    """
    Re-read every habit, apply the 70% rule to stamp and persist the valid
    days and global streak in a single write.

    Not transactional: two devices toggling different habits at once can both
    read a stale habit list.
    """
    uid = user["uid"]
    valid_dates = user.get("valid_streak_dates") or []
    evaluation = evaluate_day(get_habits(db, uid), stamp)
    if evaluation is None:
        return {"valid_day": False, "global_streak": user.get("global_streak") or 0}

    valid_dates = update_valid_dates(valid_dates, stamp, evaluation.is_valid_day)
    global_streak = compute_streak(valid_dates, today)
    update_user(db, uid, {"valid_streak_dates": valid_dates, "global_streak": global_streak})

    logger.info("Day %s for %s...: %d/%d habits, valid=%s, global streak %d",
                stamp, uid[:8], evaluation.completed, evaluation.total,
                evaluation.is_valid_day, global_streak)
    return {"valid_day": evaluation.is_valid_day, "global_streak": global_streak}
