import re
from datetime import date
from enum import Enum
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from .engine.streak import parse_stamp

STAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

HABIT_ICONS = ("Activity", "BookOpen", "Droplets", "Moon", "Sun", "Zap", "Coffee", "Music", "Code")
DEFAULT_ICON = "Activity"


def _validate_stamp(v: str) -> str:
    if not STAMP_RE.match(v) or parse_stamp(v) is None:
        raise ValueError("must be a yyyy-MM-dd date")
    return v


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class UserRegister(BaseModel):
    uid: str = Field(min_length=1, max_length=128)
    display_name: Optional[str] = Field(default=None, max_length=60)
    email: Optional[str] = Field(default=None, max_length=254)


class ProfilePatch(BaseModel):
    display_name: str = Field(min_length=1, max_length=60)


class SettingsPatch(BaseModel):
    notifications: Optional[bool] = None
    theme: Optional[str] = Field(default=None, pattern="^(dark|light)$")


class HabitCreate(BaseModel):
    name: str = Field(min_length=1, max_length=60)
    icon: str = DEFAULT_ICON
    daily_goal: int = Field(default=1, ge=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, v):
        # Unknown icons render as the default rather than failing the request
        return v if v in HABIT_ICONS else DEFAULT_ICON


class HabitToggle(BaseModel):
    date: Optional[str] = None  # defaults to today on the server

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _validate_stamp(v) if v is not None else None


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    description: str = ""
    priority: Priority = Priority.medium
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()


class TaskPatch(BaseModel):
    completed: bool
