"""
burgerhero.api.routers.navigation

Route resolution for the UI shell.

Responsibilities:
- Evaluate the role guard for a path against the current auth store.
- Manage the pending plan consumed by the post-auth checkout redirect.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from burgerhero.api.deps import app_context
from burgerhero.auth.guard import resolve_navigation
from burgerhero.context import AppContext
from burgerhero.stores.pending_plan import PendingPlan

router = APIRouter(prefix="/v1/navigation", tags=["navigation"])


class NavigationResponse(BaseModel):
    path: str
    action: str
    location: str
    guard: str | None = None


class PendingPlanRequest(BaseModel):
    id: str = Field(min_length=1, max_length=128)
    name: str = Field(default="", max_length=256)
    price_cents: int = Field(default=0, ge=0)


@router.get("/resolve", response_model=NavigationResponse)
async def resolve(
    path: str = Query(default="/", max_length=2048),
    ctx: AppContext = Depends(app_context),
) -> NavigationResponse:
    user = ctx.auth.user
    result = resolve_navigation(
        path,
        is_authed=ctx.auth.is_authed,
        role=user.role if user else None,
    )
    return NavigationResponse(
        path=result.path,
        action=result.action,
        location=result.location,
        guard=result.guard.value if result.guard else None,
    )


@router.put("/pending-plan", response_model=PendingPlanRequest)
async def set_pending_plan(
    body: PendingPlanRequest, ctx: AppContext = Depends(app_context)
) -> PendingPlanRequest:
    await ctx.pending_plan.set(PendingPlan(id=body.id, name=body.name, price_cents=body.price_cents))
    return body


@router.delete("/pending-plan")
async def clear_pending_plan(ctx: AppContext = Depends(app_context)) -> dict[str, str]:
    await ctx.pending_plan.clear()
    return {"status": "cleared"}
