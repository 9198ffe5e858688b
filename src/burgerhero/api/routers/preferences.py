"""
burgerhero.api.routers.preferences

Theme and card customization.

Responsibilities:
- Read the preference snapshot and the applied document theme.
- Update local preferences (persisted immediately, applied as side effects).
- Mirror the snapshot to the remote profile on explicit save.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from burgerhero.api.deps import app_context, current_user
from burgerhero.auth.models import UserProfile
from burgerhero.context import AppContext

router = APIRouter(prefix="/v1/preferences", tags=["preferences"])


class PreferencesPatch(BaseModel):
    hero_theme: str | None = None
    color_mode: Literal["system", "light", "dark"] | None = None
    app_font_size: Literal["small", "medium", "large"] | None = None
    card_template_id: str | None = None
    font: str | None = Field(default=None, max_length=128)
    font_color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    font_size: int | None = Field(default=None, ge=10, le=48)


class PreferencesResponse(BaseModel):
    snapshot: dict[str, Any]
    app_font_size: str
    document: dict[str, Any]
    selected_template: dict[str, Any]
    templates: list[dict[str, Any]]


def _response(ctx: AppContext) -> PreferencesResponse:
    selected = ctx.card.selected_template()
    return PreferencesResponse(
        snapshot=ctx.preferences.snapshot().to_dict(),
        app_font_size=ctx.theme.app_font_size,
        document=ctx.theme.root.to_dict(),
        selected_template={"id": selected.id, "image_url": selected.image_url, "name": selected.name},
        templates=[
            {"id": t.id, "image_url": t.image_url, "name": t.name}
            for t in ctx.card.available_templates
        ],
    )


@router.get("", response_model=PreferencesResponse)
async def get_preferences(ctx: AppContext = Depends(app_context)) -> PreferencesResponse:
    return _response(ctx)


@router.patch("", response_model=PreferencesResponse)
async def update_preferences(
    body: PreferencesPatch, ctx: AppContext = Depends(app_context)
) -> PreferencesResponse:
    await ctx.preferences.update(**body.model_dump(exclude_unset=True))
    return _response(ctx)


@router.post("/save", response_model=PreferencesResponse)
async def save_preferences(
    _: UserProfile = Depends(current_user),
    ctx: AppContext = Depends(app_context),
) -> PreferencesResponse:
    await ctx.preferences.save()
    return _response(ctx)
