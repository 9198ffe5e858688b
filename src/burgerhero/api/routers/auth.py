"""
burgerhero.api.routers.auth

Sign-in/up/out and the auth cache.

Responsibilities:
- Drive the session bootstrapper for explicit user actions.
- Expose the auth store snapshot and its patch/refresh operations.
- Tell the UI where to go after authenticating.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from burgerhero.api.deps import app_context, current_user
from burgerhero.auth.guard import SIGN_IN_PATH
from burgerhero.auth.models import UserProfile
from burgerhero.context import AppContext
from burgerhero.services.navigation import post_auth_redirect
from burgerhero.services.session_bootstrapper import SignUpForm

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1)
    next: str | None = None


class SignUpRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=6)
    cpf: str
    birth_date: str | None = None
    whatsapp: str | None = None
    next: str | None = None


class UserPatch(BaseModel):
    display_name: str | None = Field(default=None, max_length=256)
    avatar_url: str | None = None
    whatsapp: str | None = None
    birth_date: str | None = None
    hero_theme: str | None = None


class AuthStateResponse(BaseModel):
    user: dict[str, Any] | None
    is_authed: bool
    loading: bool
    last_error: str | None = None


class AuthResultResponse(BaseModel):
    user: dict[str, Any] | None
    redirect_to: str
    confirmation_required: bool = False


class RefreshResponse(BaseModel):
    updated: bool
    user: dict[str, Any] | None


def _state(ctx: AppContext) -> AuthStateResponse:
    return AuthStateResponse(
        user=ctx.auth.user.to_dict() if ctx.auth.user else None,
        is_authed=ctx.auth.is_authed,
        loading=ctx.auth.loading,
        last_error=ctx.bootstrapper.last_error,
    )


@router.post("/sign-in", response_model=AuthResultResponse)
async def sign_in(body: SignInRequest, ctx: AppContext = Depends(app_context)) -> AuthResultResponse:
    # AuthFailure / ProfileUnrecoverable are mapped in api.errors.
    user = await ctx.bootstrapper.sign_in(body.email, body.password)
    return AuthResultResponse(
        user=user.to_dict(),
        redirect_to=post_auth_redirect(
            user.role, pending_plan=ctx.pending_plan.plan, next_path=body.next
        ),
    )


@router.post("/sign-up", response_model=AuthResultResponse)
async def sign_up(body: SignUpRequest, ctx: AppContext = Depends(app_context)) -> AuthResultResponse:
    result = await ctx.bootstrapper.sign_up(
        SignUpForm(
            name=body.name,
            email=body.email,
            password=body.password,
            cpf=body.cpf,
            birth_date=body.birth_date,
            whatsapp=body.whatsapp,
        )
    )
    if result.confirmation_required or result.user is None:
        return AuthResultResponse(user=None, redirect_to=SIGN_IN_PATH, confirmation_required=True)
    return AuthResultResponse(
        user=result.user.to_dict(),
        redirect_to=post_auth_redirect(
            result.user.role, pending_plan=ctx.pending_plan.plan, next_path=body.next
        ),
    )


@router.post("/sign-out", response_model=AuthStateResponse)
async def sign_out(ctx: AppContext = Depends(app_context)) -> AuthStateResponse:
    await ctx.bootstrapper.sign_out()
    return _state(ctx)


@router.get("/state", response_model=AuthStateResponse)
async def auth_state(ctx: AppContext = Depends(app_context)) -> AuthStateResponse:
    return _state(ctx)


@router.patch("/user", response_model=AuthStateResponse)
async def update_user(
    body: UserPatch,
    _: UserProfile = Depends(current_user),
    ctx: AppContext = Depends(app_context),
) -> AuthStateResponse:
    # Profile fields are non-nullable strings; an explicit null means "leave as is".
    await ctx.auth.update_user(body.model_dump(exclude_unset=True, exclude_none=True))
    return _state(ctx)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_user(
    user: UserProfile = Depends(current_user),
    ctx: AppContext = Depends(app_context),
) -> RefreshResponse:
    updated = await ctx.auth.refresh_user_from_db(user.id)
    return RefreshResponse(
        updated=updated,
        user=ctx.auth.user.to_dict() if ctx.auth.user else None,
    )
