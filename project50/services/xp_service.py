"""XP and level rules.

Level formula: ``level = floor(sqrt(xp / 100)) + 1``. Level L spans
``[100*(L-1)^2, 100*L^2)`` XP.
"""

from math import isqrt

from project50.schemas.progress import Progress

HABIT_XP = 10
DAILY_BASE_XP = 50
PERFECT_DAY_BONUS = 50
FOCUS_XP_PER_MINUTE = 2


def level_for_xp(xp: int) -> int:
    if xp < 0:
        xp = 0
    return isqrt(int(xp) // 100) + 1


def xp_threshold_for_level(level: int) -> int:
    """Minimum XP that reaches ``level``."""
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    return 100 * (level - 1) ** 2


def level_progress(xp: int) -> tuple[int, int]:
    """(XP earned inside the current level, XP span of the current level)."""
    level = level_for_xp(xp)
    floor_xp = xp_threshold_for_level(level)
    return xp - floor_xp, xp_threshold_for_level(level + 1) - floor_xp


def toggle_xp_delta(marked: bool) -> int:
    return HABIT_XP if marked else -HABIT_XP


def daily_completion_xp(completed_count: int, total_habits: int) -> int:
    bonus = PERFECT_DAY_BONUS if completed_count == total_habits else 0
    return DAILY_BASE_XP + HABIT_XP * completed_count + bonus


def focus_session_xp(minutes: int) -> int:
    return FOCUS_XP_PER_MINUTE * max(0, minutes)


def apply_xp(progress: Progress, delta: int) -> Progress:
    """Add ``delta`` XP (floored at zero) and keep the cached level in step."""
    xp = max(0, progress.xp + delta)
    return progress.model_copy(update={"xp": xp, "level": level_for_xp(xp)})


def with_level(progress: Progress) -> Progress:
    """Recompute a cached level that may have drifted from the formula."""
    level = level_for_xp(progress.xp)
    if level == progress.level:
        return progress
    return progress.model_copy(update={"level": level})
