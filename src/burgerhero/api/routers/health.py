"""
burgerhero.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Liveness probe (`/healthz`).
- Readiness probe (`/readyz`): local storage reachable and first bootstrap done.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from burgerhero.api.deps import app_context
from burgerhero.context import AppContext

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(ctx: AppContext = Depends(app_context)) -> dict[str, str]:
    await ctx.storage.ping()
    if ctx.auth.loading:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Bootstrapping")
    return {"status": "ready"}
