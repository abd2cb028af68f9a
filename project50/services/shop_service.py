"""XP shop: streak freezes and the Time Warp streak repair."""

import logging
from datetime import datetime
from typing import NamedTuple, Optional

from project50.exceptions import (
    InsufficientFunds,
    NoFreezeAvailable,
    NoRepairableDay,
    UnknownItem,
)
from project50.schemas.progress import (
    FREEZE_REASON_MANUAL,
    FREEZE_REASON_TIME_WARP,
    Progress,
)
from project50.services import streak_service, xp_service
from project50.services.day_records import blank_day, get_day, put_day

logger = logging.getLogger(__name__)


class ShopItem(NamedTuple):
    id: str
    label: str
    description: str
    cost: int
    icon: str
    color: str


SHOP_ITEMS: dict[str, ShopItem] = {
    "streak_freeze": ShopItem(
        "streak_freeze",
        "Streak Freeze",
        "Protect your streak for one day if you miss habits.",
        500,
        "Snowflake",
        "text-cyan-400",
    ),
    "streak_repair": ShopItem(
        "streak_repair",
        "Time Warp",
        "Retroactively save the most recent missed day.",
        1000,
        "History",
        "text-fuchsia-400",
    ),
}


def find_repairable_day(progress: Progress) -> Optional[int]:
    """Most recent day before today that is missing or incomplete and not frozen."""
    habit_ids = progress.habit_ids
    for day in range(progress.current_day - 1, 0, -1):
        if not streak_service.is_record_complete(progress.history.get(day), habit_ids):
            return day
    return None


def _repair_streak(progress: Progress, now: Optional[datetime]) -> Progress:
    day = find_repairable_day(progress)
    if day is None:
        raise NoRepairableDay(f"no incomplete day before day {progress.current_day}")
    current = get_day(progress, day) or blank_day(progress, day, now)
    repaired = current.model_copy(
        update={"frozen": True, "freeze_reason": FREEZE_REASON_TIME_WARP}
    )
    logger.info("Time Warp repaired day %d", day)
    return put_day(progress, day, repaired)


def purchase(progress: Progress, item_id: str, now: Optional[datetime] = None) -> Progress:
    """Buy a shop item with XP.

    The debit and the item's effect land together or not at all: when the
    effect fails the debited copy is discarded and the caller keeps ``progress``.

    Raises UnknownItem, InsufficientFunds or NoRepairableDay.
    """
    item = SHOP_ITEMS.get(item_id)
    if item is None:
        raise UnknownItem(f"unknown shop item {item_id!r}")
    if progress.xp < item.cost:
        raise InsufficientFunds(item.id, item.cost, progress.xp)

    debited = xp_service.apply_xp(progress, -item.cost)

    if item.id == "streak_freeze":
        return debited.model_copy(update={"streak_freezes": debited.streak_freezes + 1})

    try:
        return _repair_streak(debited, now)
    except NoRepairableDay:
        logger.info("Time Warp purchase rejected, %d XP refunded", item.cost)
        raise


def apply_freeze(progress: Progress, now: Optional[datetime] = None) -> Progress:
    """Spend one freeze from inventory on the current day."""
    day = progress.current_day
    current = get_day(progress, day) or blank_day(progress, day, now)
    if current.frozen:
        return progress
    if progress.streak_freezes < 1:
        raise NoFreezeAvailable(f"no streak freezes left for day {day}")

    frozen = current.model_copy(update={"frozen": True, "freeze_reason": FREEZE_REASON_MANUAL})
    updated = put_day(progress, day, frozen)
    return updated.model_copy(update={"streak_freezes": progress.streak_freezes - 1})


def remove_freeze(progress: Progress) -> Progress:
    """Unfreeze the current day and return its freeze to inventory."""
    day = progress.current_day
    current = get_day(progress, day)
    if current is None or not current.frozen:
        return progress

    thawed = current.model_copy(update={"frozen": False, "freeze_reason": None})
    updated = put_day(progress, day, thawed)
    return updated.model_copy(update={"streak_freezes": progress.streak_freezes + 1})
