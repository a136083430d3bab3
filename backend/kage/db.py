import os
import logging
from functools import lru_cache
from supabase import create_client, Client

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> Client:
    url = os.environ["SUPABASE_URL"]
    key = os.environ["SUPABASE_SERVICE_KEY"]
    return create_client(url, key)


# ── Users ─────────────────────────────────────────────────────────────────────

def get_user(db: Client, uid: str) -> dict | None:
    res = db.table("users").select("*").eq("uid", uid).execute()
    return res.data[0] if res.data else None


def insert_user(db: Client, row: dict) -> None:
    db.table("users").insert(row).execute()


def update_user(db: Client, uid: str, updates: dict) -> None:
    db.table("users").update(updates).eq("uid", uid).execute()


def delete_user(db: Client, uid: str) -> None:
    # habits and tasks reference users(uid) with ON DELETE CASCADE
    db.table("users").delete().eq("uid", uid).execute()


# ── Habits ────────────────────────────────────────────────────────────────────

def get_habits(db: Client, uid: str) -> list[dict]:
    res = db.table("habits").select("*").eq("user_id", uid).order("created_at").execute()
    return res.data or []


def get_habit(db: Client, uid: str, habit_id: str) -> dict | None:
    res = db.table("habits").select("*").eq("id", habit_id).eq("user_id", uid).execute()
    return res.data[0] if res.data else None


def insert_habit(db: Client, row: dict) -> dict:
    res = db.table("habits").insert(row).execute()
    return res.data[0] if res.data else row


def update_habit(db: Client, habit_id: str, updates: dict) -> None:
    db.table("habits").update(updates).eq("id", habit_id).execute()


def delete_habit(db: Client, uid: str, habit_id: str) -> None:
    db.table("habits").delete().eq("id", habit_id).eq("user_id", uid).execute()


# ── Tasks ─────────────────────────────────────────────────────────────────────

def get_tasks(db: Client, uid: str) -> list[dict]:
    res = db.table("tasks").select("*").eq("user_id", uid).order("created_at").execute()
    return res.data or []


def get_task(db: Client, uid: str, task_id: str) -> dict | None:
    res = db.table("tasks").select("*").eq("id", task_id).eq("user_id", uid).execute()
    return res.data[0] if res.data else None


def insert_task(db: Client, row: dict) -> dict:
    res = db.table("tasks").insert(row).execute()
    return res.data[0] if res.data else row


def update_task(db: Client, task_id: str, updates: dict) -> None:
    db.table("tasks").update(updates).eq("id", task_id).execute()


def delete_task(db: Client, uid: str, task_id: str) -> None:
    db.table("tasks").delete().eq("id", task_id).eq("user_id", uid).execute()
