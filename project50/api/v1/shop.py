"""XP shop endpoints: purchases and streak freezes."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from project50.api.v1.deps import (
    get_progress,
    get_session_factory,
    get_user_id,
    http_error,
    persist,
)
from project50.exceptions import ProgressError
from project50.schemas.progress import Progress
from project50.schemas.requests import MutationResponse, PurchaseRequest, ShopItemResponse
from project50.services import progress_service
from project50.services.shop_service import SHOP_ITEMS
from project50.services.storage_service import LocalProgressStore, get_local_store

router = APIRouter(prefix="/shop", tags=["shop"])

UserId = Annotated[str, Depends(get_user_id)]
Store = Annotated[LocalProgressStore, Depends(get_local_store)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
CurrentProgress = Annotated[Progress, Depends(get_progress)]


@router.get("/items", response_model=list[ShopItemResponse])
async def list_items(progress: CurrentProgress):
    return [
        ShopItemResponse(
            id=item.id,
            label=item.label,
            description=item.description,
            cost=item.cost,
            icon=item.icon,
            affordable=progress.xp >= item.cost,
        )
        for item in SHOP_ITEMS.values()
    ]


@router.post("/purchase", response_model=MutationResponse)
async def purchase(
    body: PurchaseRequest,
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.purchase(progress, body.item_id)
    except ProgressError as exc:
        raise http_error(exc)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.post("/freeze", response_model=MutationResponse)
async def apply_freeze(
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    try:
        result = progress_service.apply_freeze(progress)
    except ProgressError as exc:
        raise http_error(exc)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )


@router.delete("/freeze", response_model=MutationResponse)
async def remove_freeze(
    progress: CurrentProgress,
    user_id: UserId,
    store: Store,
    background_tasks: BackgroundTasks,
    session_factory: SessionFactory,
):
    result = progress_service.remove_freeze(progress)
    return persist(
        result,
        user_id=user_id,
        store=store,
        background_tasks=background_tasks,
        session_factory=session_factory,
    )
