"""Remote sync: last-write-wins on ``updated_at`` between local and remote copies.

Pushing is best-effort. A mutation is complete once the new Progress is computed
and saved locally; remote failures are logged and retried by the scheduler.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from project50.crud import crud_progress_document
from project50.models.progress_document import ProgressDocument
from project50.schemas.progress import Progress
from project50.services import xp_service
from project50.services.storage_service import LocalProgressStore

logger = logging.getLogger(__name__)


def resolve(local: Optional[Progress], remote: Optional[Progress]) -> Optional[Progress]:
    """Pick the newer copy. Ties and missing remote stamps keep the local copy."""
    if local is None:
        return remote
    if remote is None or remote.updated_at is None:
        return local
    if local.updated_at is None or remote.updated_at > local.updated_at:
        return remote
    return local


def document_progress(doc: Optional[ProgressDocument]) -> Optional[Progress]:
    if doc is None:
        return None
    try:
        progress = Progress.model_validate(doc.data)
    except ValidationError as exc:
        logger.error("Remote progress for %s is unreadable: %s", doc.user_id, exc)
        return None
    progress = progress.model_copy(update={"updated_at": doc.client_updated_at})
    return xp_service.with_level(progress)


async def pull(db: AsyncSession, user_id: str, local: Optional[Progress]) -> Optional[Progress]:
    """Local copy reconciled against the remote document."""
    remote = document_progress(await crud_progress_document.fetch(db, user_id))
    chosen = resolve(local, remote)
    if chosen is not None and chosen is remote and local is not None:
        logger.info("Remote progress for %s is newer, replacing local copy", user_id)
    return chosen


async def upsert_if_newer(db: AsyncSession, user_id: str, progress: Progress) -> bool:
    """Write ``progress`` unless the remote copy is at least as new."""
    if progress.updated_at is None:
        return False
    doc = await crud_progress_document.fetch(db, user_id)
    if doc is not None and doc.client_updated_at >= progress.updated_at:
        return False
    await crud_progress_document.upsert(db, user_id, progress, progress.updated_at)
    return True


async def push(
    session_factory: async_sessionmaker[AsyncSession], user_id: str, progress: Progress
) -> bool:
    """Fire-and-forget upsert on its own session. Never raises."""
    async with session_factory() as db:
        try:
            written = await upsert_if_newer(db, user_id, progress)
            await db.commit()
        except Exception as exc:
            logger.warning("Remote sync failed for %s: %s", user_id, exc)
            await db.rollback()
            return False
    if written:
        logger.debug("Pushed progress for %s (updated_at=%s)", user_id, progress.updated_at)
    return written


async def sync_local_store(
    session_factory: async_sessionmaker[AsyncSession], store: LocalProgressStore
) -> int:
    """Push every local copy that is newer than its remote document."""
    pushed = 0
    async with session_factory() as db:
        try:
            stamps = await crud_progress_document.list_stamps(db)
            for user_id in store.user_ids():
                progress = store.load(user_id)
                if progress is None or progress.updated_at is None:
                    continue
                remote_stamp = stamps.get(user_id)
                if remote_stamp is not None and remote_stamp >= progress.updated_at:
                    continue
                await crud_progress_document.upsert(db, user_id, progress, progress.updated_at)
                pushed += 1
            await db.commit()
        except Exception as exc:
            logger.error("Background sync failed: %s", exc)
            await db.rollback()
            return 0
    return pushed
