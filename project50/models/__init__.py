from project50.models.base import Base, TimestampMixin
from project50.models.progress_document import ProgressDocument

__all__ = [
    "Base",
    "TimestampMixin",
    "ProgressDocument",
]
