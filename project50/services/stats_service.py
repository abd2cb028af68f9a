"""Read-only summaries over a challenge's history."""

from project50.schemas.progress import Progress
from project50.schemas.stats import FocusShare, HabitRate, ProgressStats
from project50.services import streak_service, xp_service


def habit_completion_rates(progress: Progress) -> list[HabitRate]:
    """Share of elapsed days on which each current habit was done, best first."""
    elapsed = max(1, progress.current_day)
    rates = []
    for habit in progress.custom_habits:
        done = sum(
            1
            for day in range(1, progress.current_day + 1)
            if day in progress.history and habit.id in progress.history[day].completed_habits
        )
        rates.append(
            HabitRate(habit_id=habit.id, label=habit.label, rate=round(done / elapsed * 100))
        )
    return sorted(rates, key=lambda r: r.rate, reverse=True)


def completion_rate(progress: Progress) -> int:
    elapsed = max(1, progress.current_day)
    return round(streak_service.complete_days(progress, 1, progress.current_day) / elapsed * 100)


def heatmap_level(progress: Progress, day: int) -> int:
    """0 empty, 1 low, 2 partial or frozen, 3 perfect."""
    data = progress.history.get(day)
    if data is None or day < 1 or day > progress.total_days:
        return 0
    if data.frozen:
        return 2
    done = set(data.completed_habits)
    count = sum(1 for habit_id in progress.habit_ids if habit_id in done)
    total = len(progress.custom_habits)
    if count == 0:
        return 0
    if count < total / 2:
        return 1
    if count < total:
        return 2
    return 3


def focus_distribution(progress: Progress) -> list[FocusShare]:
    shares = [
        FocusShare(
            habit_id=habit.id,
            label=habit.label,
            minutes=progress.habit_focus_distribution.get(habit.id, 0),
        )
        for habit in progress.custom_habits
    ]
    return sorted((s for s in shares if s.minutes > 0), key=lambda s: s.minutes, reverse=True)


def build_stats(progress: Progress) -> ProgressStats:
    into_level, level_span = xp_service.level_progress(progress.xp)
    return ProgressStats(
        current_day=progress.current_day,
        total_days=progress.total_days,
        current_streak=streak_service.current_streak(progress),
        best_streak=streak_service.best_streak(progress),
        complete_days=streak_service.complete_days(progress, 1, progress.current_day),
        completion_rate=completion_rate(progress),
        xp=progress.xp,
        level=progress.level,
        xp_into_level=into_level,
        xp_for_next_level=level_span,
        streak_freezes=progress.streak_freezes,
        total_focus_minutes=progress.total_focus_minutes,
        habit_rates=habit_completion_rates(progress),
        focus=focus_distribution(progress),
        heatmap=[heatmap_level(progress, day) for day in range(1, progress.total_days + 1)],
    )
