import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.db import async_session, init_models
from app.goals.errors import GoalError
from app.goals.router import router as goals_router
from app.goals.scheduler import GoalExpiryScheduler
from app.logging_config import setup_logging
from app.request_logger import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.create_tables:
        await init_models()
        logger.info("Database tables ready")

    scheduler = None
    if settings.goal_expiry_enabled:
        scheduler = GoalExpiryScheduler(async_session, settings.goal_expiry_interval_seconds)
        scheduler.start()
    app.state.goal_expiry = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    logger.info("Shutting down")


app = FastAPI(title="HabitLedger", version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.include_router(goals_router)


@app.exception_handler(GoalError)
async def goal_error_handler(request: Request, exc: GoalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]) or "body", "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": errors})


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "goals": {
            "create": "POST /api/habits/{habitId}/goal",
            "update": "PUT /api/goal/{id}",
            "deactivate": "POST /api/goal/{id}/deactivate",
            "delete": "DELETE /api/goal/{id}",
            "detail": "GET /api/goal/{id}",
            "habit_goals": "GET /api/habits/{habitId}/goals",
            "all_goals": "GET /api/goals/all",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
