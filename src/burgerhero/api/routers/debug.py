"""
burgerhero.api.routers.debug

Diagnostics and the recovery action offered by the top-level error guard.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from burgerhero.api.deps import app_context
from burgerhero.context import AppContext
from burgerhero.storage import AUTH_KEY

router = APIRouter(prefix="/v1/debug", tags=["debug"])


@router.get("/state")
async def debug_state(ctx: AppContext = Depends(app_context)) -> dict[str, Any]:
    session = await ctx.identity.get_session()
    return {
        "session_user_id": session.user.id if session else None,
        "auth": ctx.auth.to_dict(),
        "loading": ctx.auth.loading,
        "last_error": ctx.bootstrapper.last_error,
        "theme": ctx.theme.to_dict(),
        "card": ctx.card.to_dict(),
        "pending_plan": ctx.pending_plan.plan is not None,
    }


@router.post("/reset")
async def reset(ctx: AppContext = Depends(app_context)) -> dict[str, str]:
    # Clear the persisted auth cache, then rebuild it from the live session.
    await ctx.storage.remove(AUTH_KEY)
    outcome = await ctx.bootstrapper.reload()
    return {"status": "reset", "outcome": outcome.value}
