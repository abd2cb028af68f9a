"""Progress aggregate: the single mutation entry point.

Every operation takes a Progress value and returns a MutationResult holding the
new value plus the events the change produced. Rejected operations raise a
ProgressError subclass and the input value stays as it was.

The engines in xp_service, badge_service, streak_service and shop_service only
compute. Diffing old against new state into level-up and badge events happens
here, in ``commit``.
"""

import logging
from datetime import datetime
from typing import Any, Mapping, NamedTuple, Optional

from pydantic import ValidationError

from project50.schemas.events import EventType, ProgressEvent
from project50.schemas.progress import (
    DEFAULT_TOTAL_DAYS,
    DEFAULT_HABITS,
    Habit,
    Mood,
    Progress,
)
from project50.services import (
    badge_service,
    day_records,
    shop_service,
    streak_service,
    xp_service,
)
from project50.services.day_records import now_utc

logger = logging.getLogger(__name__)


class MutationResult(NamedTuple):
    progress: Progress
    events: list[ProgressEvent]


# ---------------------------------------------------------------------------
# Commit / event diffing
# ---------------------------------------------------------------------------


def diff_events(before: Progress, after: Progress) -> list[ProgressEvent]:
    """Level-up first (one event naming the final level), then new badges in order."""
    events: list[ProgressEvent] = []
    if after.level > before.level:
        events.append(
            ProgressEvent(
                type=EventType.level_up,
                title=f"Level {after.level}",
                description="Your discipline is growing stronger.",
                level=after.level,
            )
        )

    held = {b.id for b in before.badges}
    for badge in after.badges:
        if badge.id in held:
            continue
        definition = badge_service.lookup_badge(badge.id)
        events.append(
            ProgressEvent(
                type=EventType.badge_unlocked,
                title=definition.label,
                description=definition.description,
                badge_id=badge.id,
                icon=definition.icon,
            )
        )
    return events


def commit(
    before: Progress,
    after: Progress,
    now: Optional[datetime] = None,
    events: Optional[list[ProgressEvent]] = None,
) -> MutationResult:
    """Re-derive level and badges for ``after``, stamp it and collect events."""
    stamp = now or now_utc()
    after = xp_service.with_level(after)
    badges = badge_service.evaluate_badges(after, stamp)
    after = after.model_copy(update={"badges": badges, "updated_at": stamp})
    collected = diff_events(before, after) + list(events or [])
    for event in collected:
        logger.debug("Progress event %s: %s", event.type.value, event.title)
    return MutationResult(after, collected)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def new_challenge(
    *,
    total_days: int = DEFAULT_TOTAL_DAYS,
    habits: Optional[list[Habit]] = None,
    strict_mode: bool = False,
    user_name: str = "",
    manifesto: str = "",
    now: Optional[datetime] = None,
) -> Progress:
    _check_habits(habits or DEFAULT_HABITS)
    if total_days < 1:
        raise ValueError(f"total_days must be >= 1, got {total_days}")
    return Progress(
        user_name=user_name,
        total_days=total_days,
        start_date=now or now_utc(),
        custom_habits=list(habits or DEFAULT_HABITS),
        strict_mode=strict_mode,
        manifesto=manifesto,
    )


def start_challenge(
    *,
    total_days: int = DEFAULT_TOTAL_DAYS,
    habits: Optional[list[Habit]] = None,
    strict_mode: bool = False,
    user_name: str = "",
    manifesto: str = "",
    now: Optional[datetime] = None,
) -> MutationResult:
    stamp = now or now_utc()
    fresh = new_challenge(
        total_days=total_days,
        habits=habits,
        strict_mode=strict_mode,
        user_name=user_name,
        manifesto=manifesto,
        now=stamp,
    )
    return commit(fresh, fresh, stamp)


def _restart(progress: Progress, now: datetime) -> Progress:
    """Strict-mode failure: back to day 1 with an empty history.

    Identity, settings, XP, badges and freeze inventory carry over.
    """
    return progress.model_copy(
        update={
            "current_day": 1,
            "start_date": now,
            "history": {},
            "is_completed": False,
        }
    )


# ---------------------------------------------------------------------------
# Day records
# ---------------------------------------------------------------------------


def toggle_habit(
    progress: Progress, day: int, habit_id: str, now: Optional[datetime] = None
) -> MutationResult:
    return commit(progress, day_records.toggle_habit(progress, day, habit_id, now), now)


def update_journal(
    progress: Progress,
    day: int,
    changes: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> MutationResult:
    """Apply journal edits (notes, mood, photo, habit_logs) to one day.

    ``habit_logs`` maps habit id to note text; an empty note removes it.
    """
    updated = progress
    for field, value in changes.items():
        if field == "notes":
            updated = day_records.set_notes(updated, day, value or "", now)
        elif field == "mood":
            mood = Mood(value) if value is not None else None
            updated = day_records.set_mood(updated, day, mood, now)
        elif field == "photo":
            updated = day_records.set_photo(updated, day, value, now)
        elif field == "habit_logs":
            for habit_id, text in (value or {}).items():
                updated = day_records.set_habit_log(updated, day, habit_id, text, now)
        else:
            raise ValueError(f"unknown journal field {field!r}")
    return commit(progress, updated, now)


def record_focus_session(
    progress: Progress, habit_id: str, minutes: int, now: Optional[datetime] = None
) -> MutationResult:
    """Credit a finished focus-timer session to a habit."""
    if minutes < 1:
        raise ValueError(f"focus session must last at least a minute, got {minutes}")
    distribution = dict(progress.habit_focus_distribution)
    distribution[habit_id] = distribution.get(habit_id, 0) + minutes
    updated = progress.model_copy(
        update={
            "total_focus_minutes": progress.total_focus_minutes + minutes,
            "habit_focus_distribution": distribution,
        }
    )
    updated = xp_service.apply_xp(updated, xp_service.focus_session_xp(minutes))
    return commit(progress, updated, now)


def finish_day(
    progress: Progress, use_freeze: bool = False, now: Optional[datetime] = None
) -> MutationResult:
    """Close out the current day, award the daily XP bonus and move to the next day.

    An incomplete day can be saved with a freeze from inventory (the bonus is
    then halved). In strict mode an incomplete, unfrozen day restarts the
    challenge instead.

    Finishing the last day only marks the challenge completed: it awards no
    daily XP and skips the completeness, freeze and strict-mode checks.

    Raises NoFreezeAvailable when ``use_freeze`` is set with an empty inventory.
    """
    stamp = now or now_utc()
    if progress.is_completed:
        raise ValueError("challenge is already completed")

    if progress.current_day >= progress.total_days:
        finished = progress.model_copy(update={"is_completed": True})
        event = ProgressEvent(
            type=EventType.challenge_completed,
            title="Project Completed",
            description=(
                f"You have finished the {progress.total_days} day challenge. You are now elite."
            ),
            icon="Crown",
        )
        return commit(progress, finished, stamp, [event])

    day = progress.current_day
    working = progress
    today = day_records.get_day(working, day)
    if not streak_service.is_record_complete(today, working.habit_ids):
        if use_freeze:
            working = shop_service.apply_freeze(working, stamp)
        elif working.strict_mode:
            logger.info("Strict mode: day %d incomplete, restarting challenge", day)
            event = ProgressEvent(
                type=EventType.challenge_reset,
                title="Reset to Day 1",
                description="Strict mode: an incomplete day restarts the challenge.",
            )
            return commit(progress, _restart(progress, stamp), stamp, [event])

    today = day_records.get_day(working, day) or day_records.blank_day(working, day, stamp)
    done = set(today.completed_habits)
    completed_count = sum(1 for habit_id in working.habit_ids if habit_id in done)
    total = len(working.custom_habits)

    earned = xp_service.daily_completion_xp(completed_count, total)
    if today.frozen and completed_count < total:
        earned //= 2

    advanced = day_records.put_day(working, day, today).model_copy(
        update={"current_day": day + 1}
    )
    advanced = xp_service.apply_xp(advanced, earned)
    return commit(progress, advanced, stamp)


def set_current_day(
    progress: Progress, day: int, now: Optional[datetime] = None
) -> MutationResult:
    """Explicit override of the current day index."""
    if day < 1 or day > progress.total_days:
        raise ValueError(f"day must be between 1 and {progress.total_days}, got {day}")
    return commit(progress, progress.model_copy(update={"current_day": day}), now)


# ---------------------------------------------------------------------------
# Shop
# ---------------------------------------------------------------------------


def purchase(
    progress: Progress, item_id: str, now: Optional[datetime] = None
) -> MutationResult:
    return commit(progress, shop_service.purchase(progress, item_id, now), now)


def apply_freeze(progress: Progress, now: Optional[datetime] = None) -> MutationResult:
    return commit(progress, shop_service.apply_freeze(progress, now), now)


def remove_freeze(progress: Progress, now: Optional[datetime] = None) -> MutationResult:
    return commit(progress, shop_service.remove_freeze(progress), now)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _check_habits(habits: list[Habit]) -> None:
    ids = [h.id for h in habits]
    if len(ids) != len(set(ids)):
        raise ValueError("habit ids must be unique")


_SETTINGS_FIELDS = frozenset(
    {
        "user_name",
        "manifesto",
        "strict_mode",
        "ai_persona",
        "custom_persona_prompt",
        "custom_habits",
        "total_days",
    }
)


def update_settings(
    progress: Progress, changes: Mapping[str, Any], now: Optional[datetime] = None
) -> MutationResult:
    """Edit challenge settings.

    The edited value is re-validated as a whole, so a ``None`` for a required
    field (or any other bad value) raises ValueError and nothing changes.
    ``custom_persona_prompt`` is the one field that may be cleared with ``None``.

    Deleting a habit only removes its definition; history keeps the id.
    """
    unknown = set(changes) - _SETTINGS_FIELDS
    if unknown:
        raise ValueError(f"unknown settings fields: {sorted(unknown)}")

    try:
        updated = Progress.model_validate({**progress.model_dump(), **changes})
    except ValidationError as exc:
        raise ValueError(f"invalid settings: {exc}") from exc

    if "custom_habits" in changes:
        _check_habits(updated.custom_habits)
    if "total_days" in changes and updated.total_days < progress.current_day:
        raise ValueError(
            f"total_days cannot be shorter than the current day ({progress.current_day})"
        )

    return commit(progress, updated, now)


def clean_old_photos(
    progress: Progress, keep_recent_days: int = 30, now: Optional[datetime] = None
) -> tuple[MutationResult, int]:
    updated, cleaned = day_records.clear_old_photos(progress, keep_recent_days)
    if cleaned:
        logger.info("Cleaned photos from %d past days", cleaned)
    return commit(progress, updated, now), cleaned
