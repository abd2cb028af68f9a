"""Read-only endpoints: stats, badges and coach messages."""

from typing import Annotated

from fastapi import APIRouter, Depends

from project50.api.v1.deps import get_progress
from project50.schemas.progress import Progress
from project50.schemas.requests import BadgeResponse
from project50.schemas.stats import ProgressStats
from project50.services import motivation_service, stats_service
from project50.services.badge_service import BADGE_CATALOGUE

router = APIRouter(tags=["stats"])

CurrentProgress = Annotated[Progress, Depends(get_progress)]


@router.get("/stats", response_model=ProgressStats)
async def read_stats(progress: CurrentProgress):
    return stats_service.build_stats(progress)


@router.get("/badges", response_model=list[BadgeResponse])
async def list_badges(progress: CurrentProgress):
    unlocked = {b.id: b.unlocked_at for b in progress.badges}
    return [
        BadgeResponse(
            id=definition.id,
            label=definition.label,
            description=definition.description,
            icon=definition.icon,
            color=definition.color,
            unlocked=definition.id in unlocked,
            unlocked_at=unlocked[definition.id].isoformat() if definition.id in unlocked else None,
        )
        for definition in BADGE_CATALOGUE.values()
    ]


@router.get("/motivation")
async def read_motivation(progress: CurrentProgress):
    return {"message": await motivation_service.daily_motivation(progress)}


@router.get("/motivation/sos")
async def read_pep_talk(progress: CurrentProgress):
    return {"message": await motivation_service.emergency_pep_talk(progress)}


@router.get("/motivation/weekly-review")
async def read_weekly_review(progress: CurrentProgress):
    return {"message": await motivation_service.weekly_review(progress)}
