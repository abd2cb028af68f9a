import enum
from typing import Optional

from pydantic import BaseModel


class EventType(str, enum.Enum):
    level_up = "level_up"
    badge_unlocked = "badge_unlocked"
    challenge_completed = "challenge_completed"
    challenge_reset = "challenge_reset"


class ProgressEvent(BaseModel):
    type: EventType
    title: str
    description: str = ""
    level: Optional[int] = None
    badge_id: Optional[str] = None
    icon: Optional[str] = None
