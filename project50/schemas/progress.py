"""Domain values for a challenge: habits, day records, badges and the progress aggregate.

All models are frozen. Services never mutate a value in place; they build a new
one with ``model_copy(update=...)`` and fresh containers.
"""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TOTAL_DAYS = 50

FREEZE_REASON_MANUAL = "manual"
FREEZE_REASON_TIME_WARP = "Time Warp Redemption"


class Mood(str, enum.Enum):
    great = "great"
    good = "good"
    neutral = "neutral"
    bad = "bad"
    terrible = "terrible"

    @property
    def score(self) -> int:
        return _MOOD_SCORES[self]


_MOOD_SCORES = {
    Mood.great: 5,
    Mood.good: 4,
    Mood.neutral: 3,
    Mood.bad: 2,
    Mood.terrible: 1,
}


class AiPersona(str, enum.Enum):
    sergeant = "sergeant"
    stoic = "stoic"
    empathetic = "empathetic"
    custom = "custom"


class Habit(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=64)
    label: str = Field(..., max_length=100)
    description: str = ""
    icon: Optional[str] = None


class DayData(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    completed_habits: list[str] = Field(default_factory=list)
    habit_logs: dict[str, str] = Field(default_factory=dict)
    notes: str = ""
    mood: Optional[Mood] = None
    photo: Optional[str] = None
    frozen: bool = False
    freeze_reason: Optional[str] = None

    @field_validator("completed_habits")
    @classmethod
    def dedupe_habit_ids(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class Badge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    unlocked_at: datetime


class Progress(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_name: str = ""
    current_day: int = Field(1, ge=1)
    total_days: int = Field(DEFAULT_TOTAL_DAYS, ge=1)
    start_date: Optional[datetime] = None
    history: dict[int, DayData] = Field(default_factory=dict)
    custom_habits: list[Habit] = Field(default_factory=lambda: list(DEFAULT_HABITS))
    is_completed: bool = False
    strict_mode: bool = False
    xp: int = Field(0, ge=0)
    level: int = Field(1, ge=1)
    badges: list[Badge] = Field(default_factory=list)
    manifesto: str = ""
    total_focus_minutes: int = Field(0, ge=0)
    habit_focus_distribution: dict[str, int] = Field(default_factory=dict)
    streak_freezes: int = Field(0, ge=0)
    ai_persona: AiPersona = AiPersona.stoic
    custom_persona_prompt: Optional[str] = None
    updated_at: Optional[datetime] = None
    last_synced_at: Optional[datetime] = None

    @property
    def habit_ids(self) -> list[str]:
        return [h.id for h in self.custom_habits]

    def has_badge(self, badge_id: str) -> bool:
        return any(b.id == badge_id for b in self.badges)


DEFAULT_HABITS: list[Habit] = [
    Habit(
        id="wake_up",
        label="Wake up before 8 AM",
        description="Start your day early with intention.",
        icon="Sun",
    ),
    Habit(
        id="morning_routine",
        label="Morning Routine",
        description="1 hour with no distractions/phone.",
        icon="Coffee",
    ),
    Habit(
        id="exercise",
        label="Exercise for 1h",
        description="Push your physical limits daily.",
        icon="Dumbbell",
    ),
    Habit(
        id="reading",
        label="Read 10 Pages",
        description="Expand your knowledge constantly.",
        icon="BookOpen",
    ),
    Habit(
        id="skill",
        label="Learn a New Skill",
        description="Dedicate 1 hour to learning.",
        icon="Brain",
    ),
    Habit(
        id="diet",
        label="Healthy Diet",
        description="Fuel your body strictly. No alcohol/junk.",
        icon="Apple",
    ),
    Habit(
        id="track",
        label="Track Progress",
        description="Journal your thoughts and progress.",
        icon="PenTool",
    ),
]
