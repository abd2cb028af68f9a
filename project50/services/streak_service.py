"""Streak logic: day completeness, current streak and best streak."""

from typing import Optional

from project50.schemas.progress import DayData, Progress


def is_record_complete(data: Optional[DayData], habit_ids: list[str]) -> bool:
    """A day counts when it is frozen or every current habit is marked done.

    Ids of habits deleted since the day was recorded are ignored, so stale
    entries can neither fill a day nor push it past 100%.
    """
    if data is None:
        return False
    if data.frozen:
        return True
    done = set(data.completed_habits)
    return sum(1 for habit_id in habit_ids if habit_id in done) == len(habit_ids)


def is_day_complete(progress: Progress, day: int) -> bool:
    return is_record_complete(progress.history.get(day), progress.habit_ids)


def current_streak(progress: Progress) -> int:
    """Trailing run of complete days ending at ``current_day``.

    An incomplete current day means a streak of 0, however long yesterday's was.
    """
    habit_ids = progress.habit_ids
    streak = 0
    day = progress.current_day
    while day >= 1 and is_record_complete(progress.history.get(day), habit_ids):
        streak += 1
        day -= 1
    return streak


def best_streak(progress: Progress) -> int:
    habit_ids = progress.habit_ids
    best = 0
    run = 0
    for day in range(1, progress.current_day + 1):
        if is_record_complete(progress.history.get(day), habit_ids):
            run += 1
            if run > best:
                best = run
        else:
            run = 0
    return best


def complete_days(progress: Progress, start: int, end: int) -> int:
    """Number of complete days in the inclusive range [start, end]."""
    habit_ids = progress.habit_ids
    return sum(
        1
        for day in range(max(1, start), end + 1)
        if is_record_complete(progress.history.get(day), habit_ids)
    )
