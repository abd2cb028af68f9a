from pydantic import BaseModel


class HabitRate(BaseModel):
    habit_id: str
    label: str
    rate: int  # percent of elapsed days


class FocusShare(BaseModel):
    habit_id: str
    label: str
    minutes: int


class ProgressStats(BaseModel):
    current_day: int
    total_days: int
    current_streak: int
    best_streak: int
    complete_days: int
    completion_rate: int
    xp: int
    level: int
    xp_into_level: int
    xp_for_next_level: int
    streak_freezes: int
    total_focus_minutes: int
    habit_rates: list[HabitRate]
    focus: list[FocusShare]
    heatmap: list[int]
