from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from project50.models.base import Base, TimestampMixin


class ProgressDocument(Base, TimestampMixin):
    """Remote copy of one user's challenge progress, keyed by user id."""

    __tablename__ = "progress_documents"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    # Client-side mutation stamp used for last-write-wins; not the row's own updated_at
    client_updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
