"""Durable local blob store: one JSON document per user on disk."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from project50.config import get_settings
from project50.exceptions import QuotaExceeded
from project50.schemas.progress import Progress
from project50.services import xp_service

logger = logging.getLogger(__name__)

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_.@-]{1,64}$")


def is_valid_user_id(user_id: str) -> bool:
    return bool(_USER_ID_RE.match(user_id)) and not user_id.startswith(".")


class LocalProgressStore:
    def __init__(self, directory: Union[str, Path], quota_kb: int):
        self.directory = Path(directory)
        self.quota_kb = quota_kb

    def _path(self, user_id: str) -> Path:
        if not is_valid_user_id(user_id):
            raise ValueError(f"invalid user id {user_id!r}")
        return self.directory / f"{user_id}.json"

    def load(self, user_id: str) -> Optional[Progress]:
        """Stored progress, or None when absent or unreadable.

        Fields missing from older blobs take their defaults and the cached level
        is re-derived from XP.
        """
        path = self._path(user_id)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        try:
            progress = Progress.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Failed to load progress for %s: %s", user_id, exc)
            return None
        return xp_service.with_level(progress)

    def save(self, user_id: str, progress: Progress) -> None:
        """Write the blob atomically. Raises QuotaExceeded without touching the old copy."""
        path = self._path(user_id)
        payload = progress.model_dump_json().encode("utf-8")
        size_kb = round(len(payload) / 1024)
        if len(payload) > self.quota_kb * 1024:
            logger.warning(
                "Progress for %s is %dKB, over the %dKB quota", user_id, size_kb, self.quota_kb
            )
            raise QuotaExceeded(size_kb, self.quota_kb)

        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove(self, user_id: str) -> None:
        self._path(user_id).unlink(missing_ok=True)

    def usage(self, user_id: str) -> tuple[int, int]:
        """(used KB, percent of quota)."""
        try:
            used_bytes = self._path(user_id).stat().st_size
        except FileNotFoundError:
            return 0, 0
        used_kb = round(used_bytes / 1024)
        return used_kb, min(100, round(used_kb / self.quota_kb * 100))

    def user_ids(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))


def get_local_store() -> LocalProgressStore:
    settings = get_settings()
    return LocalProgressStore(settings.LOCAL_STORE_DIR, settings.LOCAL_STORE_QUOTA_KB)
