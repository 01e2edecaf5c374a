#!/usr/bin/env python3
"""
Workings Submission Service

This FastAPI service accepts salary/working-time submissions from
authenticated users, validates and normalizes them, enforces the upload
quota and stores them in the database.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from dotenv import load_dotenv
from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ...config import settings
from ...db.repository import WorktimeDatabase
from ...errors import HttpError
from ...logging_config import setup_logging
from ...models.user import AuthUser
from .recommendation import RecommendationService
from .submission import SubmissionService

# Load environment variables
load_dotenv()

# Package-wide logger; module loggers under worktime.* propagate here
logger = setup_logging("worktime")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database for the lifetime of the app."""
    db = await WorktimeDatabase(settings.db_path).ainit()
    app.state.db = db
    logger.info("Workings service started", extra={"context": {"db_path": settings.db_path}})
    try:
        yield
    finally:
        await db.close()
        logger.info("Workings service stopped")


app = FastAPI(
    title="Workings Submission Service",
    description="Collects salary and working-time submissions",
    version="0.1.0",
    lifespan=lifespan,
)

if settings.cors_any:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(HttpError)
async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def get_db(request: Request) -> WorktimeDatabase:
    return request.app.state.db


def get_current_user(request: Request) -> AuthUser:
    """The caller as established by the authentication layer in front of us."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if isinstance(user, AuthUser):
        return user
    return AuthUser.model_validate(user)


def get_submission_service(db: WorktimeDatabase = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


@app.post("/workings")
async def post_working(
    payload: Dict[str, Any] = Body(...),
    user: AuthUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    """Submit one salary/working-time record."""
    return await service.submit(user, payload)


@app.get("/me/recommendations")
async def get_my_recommendation(
    user: AuthUser = Depends(get_current_user),
    db: WorktimeDatabase = Depends(get_db),
):
    """Return the caller's recommendation token, creating it on first request."""
    token = await RecommendationService(db).get_recommendation_string(user.ref)
    return {"user": user.ref.model_dump(), "recommendation_string": token}


@app.get("/health")
async def health_check(db: WorktimeDatabase = Depends(get_db)):
    """Health check endpoint for Docker healthcheck."""
    if await db.check_connection():
        return {"status": "healthy", "database": "connected"}
    return JSONResponse(
        status_code=503, content={"status": "unhealthy", "database": "disconnected"}
    )


def run() -> None:
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
