"""Challenge progress endpoints: lifecycle, habits, journal and focus sessions."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from project50.api.v1.deps import (
    get_progress,
    get_session_factory,
    get_user_id,
    http_error,
    persist,
)
from project50.config import get_settings
from project50.crud import crud_progress_document
from project50.database import get_db
from project50.exceptions import ProgressError
from project50.schemas.progress import Progress
from project50.schemas.requests import (
    CurrentDayUpdate,
    FinishDayRequest,
    FocusSessionCreate,
    JournalUpdate,
    MutationResponse,
    PhotoCleanupRequest,
    SettingsUpdate,
    StartChallengeRequest,
    ToggleHabitRequest,
)
from project50.services import progress_service, sync_service
from project50.services.day_records import now_utc
from project50.services.storage_service import LocalProgressStore, get_local_store

router = APIRouter(prefix="/progress", tags=["progress"])

UserId = Annotated[str, Depends(get_user_id)]
Store = Annotated[LocalProgressStore, Depends(get_local_store)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
CurrentProgress = Annotated[Progress, Depends(get_progress)]


def _target_day(progress: Progress, day: Optional[int]) -> int:
    day = day or progress.current_day
    if day > progress.current_day:
        raise HTTPException(422, "Cannot edit a day that has not started yet")
    return day


@router.get("", response_model=Progress)
async def read_progress(progress: CurrentProgress):
    return progress


@router.post("/start", status_code=201, response_model=MutationResponse)
async def start_challenge(
    body: StartChallengeRequest,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.start_challenge(
            total_days=body.total_days or get_settings().DEFAULT_TOTAL_DAYS,
            habits=body.habits,
            strict_mode=body.strict_mode,
            user_name=body.user_name,
            manifesto=body.manifesto,
        )
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.post("/habits/toggle", response_model=MutationResponse)
async def toggle_habit(
    body: ToggleHabitRequest,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    if body.habit_id not in progress.habit_ids:
        raise HTTPException(404, "Habit not found")
    day = _target_day(progress, body.day)
    result = progress_service.toggle_habit(progress, day, body.habit_id)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.patch("/journal", response_model=MutationResponse)
async def update_journal(
    body: JournalUpdate,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    day = _target_day(progress, body.day)
    changes = body.model_dump(exclude_unset=True, exclude={"day"})
    result = progress_service.update_journal(progress, day, changes)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.post("/focus", response_model=MutationResponse)
async def record_focus_session(
    body: FocusSessionCreate,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    if body.habit_id not in progress.habit_ids:
        raise HTTPException(404, "Habit not found")
    result = progress_service.record_focus_session(progress, body.habit_id, body.minutes)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.post("/finish-day", response_model=MutationResponse)
async def finish_day(
    body: FinishDayRequest,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.finish_day(progress, use_freeze=body.use_freeze)
    except ProgressError as exc:
        raise http_error(exc)
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.put("/current-day", response_model=MutationResponse)
async def set_current_day(
    body: CurrentDayUpdate,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.set_current_day(progress, body.day)
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.patch("/settings", response_model=MutationResponse)
async def update_settings(
    body: SettingsUpdate,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.update_settings(progress, body.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(422, str(exc))
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.post("/photos/cleanup")
async def clean_old_photos(
    body: PhotoCleanupRequest,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    result, cleaned = progress_service.clean_old_photos(progress, body.keep_recent_days)
    response = persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )
    used_kb, percent = store.usage(user_id)
    return {
        "cleaned_days": cleaned,
        "used_kb": used_kb,
        "percent": percent,
        **response.model_dump(mode="json"),
    }


@router.post("/sync", response_model=Progress)
async def sync_now(
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Push the reconciled copy immediately and record the sync time locally."""
    await sync_service.upsert_if_newer(db, user_id, progress)
    synced = progress.model_copy(update={"last_synced_at": now_utc()})
    try:
        store.save(user_id, synced)
    except ProgressError as exc:
        raise http_error(exc)
    return synced


@router.delete("", status_code=204)
async def reset_challenge(
    user_id: UserId,
    store: Store,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Drop both the local copy and the remote document."""
    store.remove(user_id)
    await crud_progress_document.remove(db, id=user_id)
