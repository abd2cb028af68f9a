"""FastAPI application: challenge REST API plus the background sync scheduler."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from project50.config import get_settings
from project50.exceptions import ProgressError
from project50.services.scheduler_service import scheduler, setup_scheduler

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store_dir = Path(settings.LOCAL_STORE_DIR)
    store_dir.mkdir(parents=True, exist_ok=True)
    logger.info(
        "Project 50 starting (local store %s, quota %dKB)",
        store_dir,
        settings.LOCAL_STORE_QUOTA_KB,
    )

    setup_scheduler()
    scheduler.start()
    if settings.SYNC_ENABLED:
        logger.info("Remote sync every %d minutes", settings.SYNC_INTERVAL_MINUTES)
    else:
        logger.info("SYNC_ENABLED is off – progress stays local until /progress/sync")

    yield

    scheduler.shutdown(wait=False)
    logger.info("Project 50 stopped")


app = FastAPI(
    title="Project 50",
    description="Multi-habit daily challenge tracker with streaks, XP, badges and a streak shop",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProgressError)
async def progress_error_handler(request: Request, exc: ProgressError):
    # Routes translate the errors they expect; anything else surfaces as a 400
    logger.warning("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(
        {"detail": {"error": type(exc).__name__, "message": exc.user_message}},
        status_code=400,
    )


from project50.api.v1.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok", "service": "project50", "sync_enabled": settings.SYNC_ENABLED}


@app.get("/health/ready")
async def health_ready():
    """Readiness: remote database reachable and local store writable."""
    from sqlalchemy import text

    from project50.database import engine

    checks = {"database": "ok", "local_store": "ok"}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database readiness check failed: %s", e)
        checks["database"] = "error"

    if not os.access(settings.LOCAL_STORE_DIR, os.W_OK):
        checks["local_store"] = "error"

    if "error" in checks.values():
        return JSONResponse({"status": "not_ready", **checks}, status_code=503)
    return {"status": "ready", **checks}
