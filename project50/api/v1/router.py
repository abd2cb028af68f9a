"""Aggregates all v1 routers."""
from fastapi import APIRouter
from project50.api.v1.progress import router as progress_router
from project50.api.v1.shop import router as shop_router
from project50.api.v1.stats import router as stats_router

router = APIRouter()
router.include_router(progress_router)
router.include_router(shop_router)
router.include_router(stats_router)
