from typing import Optional

from pydantic import BaseModel, Field

from project50.schemas.events import ProgressEvent
from project50.schemas.progress import AiPersona, Habit, Mood, Progress


class StartChallengeRequest(BaseModel):
    total_days: Optional[int] = Field(None, ge=1, le=366)
    habits: Optional[list[Habit]] = None
    strict_mode: bool = False
    user_name: str = Field("", max_length=100)
    manifesto: str = ""


class ToggleHabitRequest(BaseModel):
    habit_id: str
    day: Optional[int] = Field(None, ge=1)  # defaults to the current day


class JournalUpdate(BaseModel):
    day: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
    mood: Optional[Mood] = None
    photo: Optional[str] = None
    habit_logs: Optional[dict[str, str]] = None


class FocusSessionCreate(BaseModel):
    habit_id: str
    minutes: int = Field(..., ge=1, le=600)


class FinishDayRequest(BaseModel):
    use_freeze: bool = False


class CurrentDayUpdate(BaseModel):
    day: int = Field(..., ge=1)


class SettingsUpdate(BaseModel):
    user_name: Optional[str] = Field(None, max_length=100)
    manifesto: Optional[str] = None
    strict_mode: Optional[bool] = None
    ai_persona: Optional[AiPersona] = None
    custom_persona_prompt: Optional[str] = None
    custom_habits: Optional[list[Habit]] = None
    total_days: Optional[int] = Field(None, ge=1, le=366)


class PhotoCleanupRequest(BaseModel):
    keep_recent_days: int = Field(30, ge=1)


class PurchaseRequest(BaseModel):
    item_id: str


class MutationResponse(BaseModel):
    progress: Progress
    events: list[ProgressEvent] = []
    persisted: bool = True
    warning: Optional[str] = None


class ShopItemResponse(BaseModel):
    id: str
    label: str
    description: str
    cost: int
    icon: str
    affordable: bool


class BadgeResponse(BaseModel):
    id: str
    label: str
    description: str
    icon: str
    color: str
    unlocked: bool
    unlocked_at: Optional[str] = None
