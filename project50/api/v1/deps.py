"""FastAPI dependencies and helpers shared by the v1 routers."""

from typing import Annotated, Optional

from fastapi import BackgroundTasks, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from project50.database import AsyncSessionLocal, get_db
from project50.exceptions import (
    InsufficientFunds,
    NoFreezeAvailable,
    NoRepairableDay,
    ProgressError,
    QuotaExceeded,
    UnknownItem,
)
from project50.schemas.progress import Progress
from project50.schemas.requests import MutationResponse
from project50.services import sync_service
from project50.services.progress_service import MutationResult
from project50.services.storage_service import (
    LocalProgressStore,
    get_local_store,
    is_valid_user_id,
)

_STATUS_BY_ERROR = {
    UnknownItem: 404,
    InsufficientFunds: 409,
    NoRepairableDay: 409,
    NoFreezeAvailable: 409,
    QuotaExceeded: 507,
}


def http_error(exc: ProgressError) -> HTTPException:
    status = _STATUS_BY_ERROR.get(type(exc), 400)
    return HTTPException(
        status_code=status,
        detail={"error": type(exc).__name__, "message": exc.user_message},
    )


async def get_user_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    if not is_valid_user_id(x_user_id):
        raise HTTPException(status_code=422, detail="Invalid X-User-Id header")
    return x_user_id


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


async def get_progress(
    user_id: Annotated[str, Depends(get_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[LocalProgressStore, Depends(get_local_store)],
) -> Progress:
    """Local copy reconciled with the remote one; 404 before a challenge is started."""
    progress = await sync_service.pull(db, user_id, store.load(user_id))
    if progress is None:
        raise HTTPException(status_code=404, detail="No challenge started")
    return progress


def persist(
    result: MutationResult,
    *,
    user_id: str,
    store: LocalProgressStore,
    background_tasks: BackgroundTasks,
    session_factory: async_sessionmaker[AsyncSession],
) -> MutationResponse:
    """Save locally, queue the remote push and build the response.

    A full local store does not undo the mutation: the new state is still
    returned and pushed remotely, flagged as not persisted.
    """
    persisted = True
    warning = None
    try:
        store.save(user_id, result.progress)
    except QuotaExceeded as exc:
        persisted = False
        warning = exc.user_message

    background_tasks.add_task(sync_service.push, session_factory, user_id, result.progress)
    return MutationResponse(
        progress=result.progress,
        events=result.events,
        persisted=persisted,
        warning=warning,
    )
