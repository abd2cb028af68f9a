from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from project50.crud.base import CRUDBase
from project50.models.progress_document import ProgressDocument
from project50.schemas.progress import Progress


class CRUDProgressDocument(CRUDBase[ProgressDocument]):
    async def fetch(self, db: AsyncSession, user_id: str) -> Optional[ProgressDocument]:
        result = await db.execute(
            select(ProgressDocument).where(ProgressDocument.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        user_id: str,
        progress: Progress,
        updated_at: datetime,
    ) -> ProgressDocument:
        data = progress.model_dump(mode="json")
        doc = await self.fetch(db, user_id)
        if doc is None:
            doc = ProgressDocument(user_id=user_id, data=data, client_updated_at=updated_at)
            db.add(doc)
        else:
            doc.data = data
            doc.client_updated_at = updated_at
        await db.flush()
        return doc

    async def list_stamps(self, db: AsyncSession) -> dict[str, datetime]:
        """user_id -> client_updated_at for every stored document."""
        result = await db.execute(
            select(ProgressDocument.user_id, ProgressDocument.client_updated_at)
        )
        return {user_id: stamp for user_id, stamp in result.all()}


crud_progress_document = CRUDProgressDocument(ProgressDocument)
