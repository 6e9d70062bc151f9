"""
account_worker.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness checks (`/status`, `/healthz`).
- Provide readiness check (`/readyz`) with DB and broker connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from account_worker.api.deps import db_session
from account_worker.errors import TransportError

router = APIRouter()


@router.get("/status", response_class=PlainTextResponse)
async def status() -> str:
    return "Account worker is running"


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    # Liveness: process is up and serving HTTP.
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request, session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable"
        ) from e
    try:
        await request.app.state.broker.ping()
    except TransportError as e:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# Kubernetes typically uses /healthz for liveness and /readyz for readiness gating.
