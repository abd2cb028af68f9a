"""Badge catalogue and unlock rules."""

from datetime import datetime
from typing import Callable, NamedTuple, Optional

from project50.schemas.progress import Badge, Progress
from project50.services import streak_service
from project50.services.day_records import now_utc

STRICT_MASTER_DAYS = 10
WEEK_WARRIOR_DAYS = 7


class BadgeDefinition(NamedTuple):
    id: str
    label: str
    description: str
    icon: str
    color: str


BADGE_CATALOGUE: dict[str, BadgeDefinition] = {
    "first_step": BadgeDefinition(
        "first_step", "First Step", "Completed Day 1.", "Footprints", "text-emerald-400"
    ),
    "week_warrior": BadgeDefinition(
        "week_warrior", "Week Warrior", "Completed the first 7 days.", "Sword", "text-blue-400"
    ),
    "halfway_hero": BadgeDefinition(
        "halfway_hero",
        "Halfway Hero",
        "Reached the 50% mark of the challenge.",
        "Mountain",
        "text-yellow-400",
    ),
    "strict_master": BadgeDefinition(
        "strict_master",
        "Iron Will",
        "Completed 10 days in Strict Mode.",
        "ShieldAlert",
        "text-red-500",
    ),
    "project_elite": BadgeDefinition(
        "project_elite", "Project Elite", "Completed the full challenge.", "Crown", "text-purple-400"
    ),
}

UNKNOWN_BADGE = BadgeDefinition("unknown", "Badge", "", "Award", "text-zinc-400")


def lookup_badge(badge_id: str) -> BadgeDefinition:
    return BADGE_CATALOGUE.get(badge_id, UNKNOWN_BADGE)


def _first_step(progress: Progress) -> bool:
    return streak_service.is_day_complete(progress, 1)


def _week_warrior(progress: Progress) -> bool:
    return streak_service.complete_days(progress, 1, WEEK_WARRIOR_DAYS) == WEEK_WARRIOR_DAYS


def _halfway_hero(progress: Progress) -> bool:
    return progress.current_day > progress.total_days // 2


def _strict_master(progress: Progress) -> bool:
    if not progress.strict_mode:
        return False
    return streak_service.complete_days(progress, 1, progress.current_day) >= STRICT_MASTER_DAYS


def _project_elite(progress: Progress) -> bool:
    return streak_service.complete_days(progress, 1, progress.total_days) == progress.total_days


_PREDICATES: dict[str, Callable[[Progress], bool]] = {
    "first_step": _first_step,
    "week_warrior": _week_warrior,
    "halfway_hero": _halfway_hero,
    "strict_master": _strict_master,
    "project_elite": _project_elite,
}


def qualifying_badges(progress: Progress) -> list[str]:
    """Catalogue ids whose unlock condition holds right now, in catalogue order."""
    return [badge_id for badge_id in BADGE_CATALOGUE if _PREDICATES[badge_id](progress)]


def evaluate_badges(progress: Progress, now: Optional[datetime] = None) -> list[Badge]:
    """Held badges plus any newly qualifying ones, stamped with ``now``.

    Never drops a held badge, even when its condition no longer holds.
    """
    held = list(progress.badges)
    held_ids = {b.id for b in held}
    stamp = now or now_utc()
    for badge_id in qualifying_badges(progress):
        if badge_id not in held_ids:
            held.append(Badge(id=badge_id, unlocked_at=stamp))
            held_ids.add(badge_id)
    return held
