"""Day record store: lazy per-day records keyed by 1-based day index."""

from datetime import UTC, date, datetime, timedelta
from typing import Optional

from project50.schemas.progress import DayData, Mood, Progress
from project50.services import xp_service


def now_utc() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def get_day(progress: Progress, day: int) -> Optional[DayData]:
    return progress.history.get(day)


def calendar_date(progress: Progress, day: int) -> Optional[date]:
    """Calendar date shown for a day index, or None before the challenge starts."""
    if progress.start_date is None:
        return None
    return progress.start_date.date() + timedelta(days=day - 1)


def day_for_date(progress: Progress, when: date) -> int:
    """Day index for a calendar date; 0 when outside the challenge window."""
    if progress.start_date is None:
        return 0
    day = (when - progress.start_date.date()).days + 1
    if day < 1 or day > progress.total_days:
        return 0
    return day


def blank_day(progress: Progress, day: int, now: Optional[datetime] = None) -> DayData:
    when = calendar_date(progress, day)
    stamp = when.isoformat() if when is not None else (now or now_utc()).isoformat()
    return DayData(date=stamp)


def put_day(progress: Progress, day: int, data: DayData) -> Progress:
    history = dict(progress.history)
    history[day] = data
    return progress.model_copy(update={"history": history})


def _edit_day(
    progress: Progress, day: int, now: Optional[datetime], **changes
) -> Progress:
    current = get_day(progress, day) or blank_day(progress, day, now)
    return put_day(progress, day, current.model_copy(update=changes))


def toggle_habit(
    progress: Progress, day: int, habit_id: str, now: Optional[datetime] = None
) -> Progress:
    """Mark or unmark a habit on a day and apply the per-toggle XP delta.

    Never fails. Guarding against edits to future days is left to the caller.
    """
    current = get_day(progress, day) or blank_day(progress, day, now)
    completed = list(current.completed_habits)
    marked = habit_id not in completed
    if marked:
        completed.append(habit_id)
    else:
        completed.remove(habit_id)

    updated = put_day(progress, day, current.model_copy(update={"completed_habits": completed}))
    return xp_service.apply_xp(updated, xp_service.toggle_xp_delta(marked))


def set_notes(progress: Progress, day: int, notes: str, now: Optional[datetime] = None) -> Progress:
    return _edit_day(progress, day, now, notes=notes)


def set_mood(
    progress: Progress, day: int, mood: Optional[Mood], now: Optional[datetime] = None
) -> Progress:
    return _edit_day(progress, day, now, mood=mood)


def set_photo(
    progress: Progress, day: int, photo: Optional[str], now: Optional[datetime] = None
) -> Progress:
    return _edit_day(progress, day, now, photo=photo)


def set_habit_log(
    progress: Progress,
    day: int,
    habit_id: str,
    text: Optional[str],
    now: Optional[datetime] = None,
) -> Progress:
    """Attach a free-text note to one habit on a day; empty text removes it."""
    current = get_day(progress, day) or blank_day(progress, day, now)
    logs = dict(current.habit_logs)
    if text:
        logs[habit_id] = text
    else:
        logs.pop(habit_id, None)
    return put_day(progress, day, current.model_copy(update={"habit_logs": logs}))


def clear_old_photos(progress: Progress, keep_recent_days: int = 30) -> tuple[Progress, int]:
    """Drop photos older than the most recent ``keep_recent_days`` days."""
    cutoff = progress.current_day - keep_recent_days
    if cutoff < 1:
        return progress, 0

    history = dict(progress.history)
    cleaned = 0
    for day, data in progress.history.items():
        if day <= cutoff and data.photo:
            history[day] = data.model_copy(update={"photo": None})
            cleaned += 1

    if not cleaned:
        return progress, 0
    return progress.model_copy(update={"history": history}), cleaned
