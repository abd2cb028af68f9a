"""Rejected-operation errors raised by the progress services.

Every error here is recoverable: the operation that raised it left the caller's
Progress value untouched.
"""

from typing import Optional


class ProgressError(Exception):
    """Base class; ``user_message`` is safe to show to the user."""

    user_message = "That action could not be completed."

    def __init__(self, message: str = "", user_message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class UnknownItem(ProgressError):
    user_message = "That item is not sold in the shop."


class InsufficientFunds(ProgressError):
    user_message = "Not enough XP for this item."

    def __init__(self, item_id: str, cost: int, balance: int):
        super().__init__(f"{item_id} costs {cost} XP, balance is {balance}")
        self.item_id = item_id
        self.cost = cost
        self.balance = balance


class NoRepairableDay(ProgressError):
    user_message = "Every past day is already complete. Your XP was not spent."


class NoFreezeAvailable(ProgressError):
    user_message = "You have no Streak Freezes left. Buy one in the shop."


class QuotaExceeded(ProgressError):
    user_message = "Storage full! Please delete some photos in Settings."

    def __init__(self, size_kb: int, quota_kb: int):
        super().__init__(f"progress blob is {size_kb}KB, quota is {quota_kb}KB")
        self.size_kb = size_kb
        self.quota_kb = quota_kb
