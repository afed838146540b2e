"""Challenge engine FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from challenge_engine.api import achievements, challenges, health, observations, points
from challenge_engine.core.config import settings
from challenge_engine.core.errors import EngineError, TransientStoreError, Unauthenticated

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _error_response(exc: EngineError) -> JSONResponse:
    body = {"detail": exc.detail, "code": exc.code}
    if isinstance(exc, TransientStoreError):
        body["retryable"] = True
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    return _error_response(exc)


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeoutError)
async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("data_store_unavailable path=%s error=%s", request.url.path, exc)
    return _error_response(TransientStoreError("Data store unavailable, retry the request"))


app.include_router(health.router)
app.include_router(challenges.router)
app.include_router(observations.router)
app.include_router(points.router)
app.include_router(achievements.router)
