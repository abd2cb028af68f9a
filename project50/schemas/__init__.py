from project50.schemas.progress import Badge, DayData, Habit, Mood, AiPersona, Progress
from project50.schemas.events import EventType, ProgressEvent
from project50.schemas.stats import ProgressStats, HabitRate, FocusShare
from project50.schemas.requests import MutationResponse, PurchaseRequest, StartChallengeRequest
