"""
burgerhero.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the `AppContext` created at startup.
- Provide an authenticated-user dependency for endpoints that need one.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED

from burgerhero.auth.models import UserProfile
from burgerhero.context import AppContext


def app_context(request: Request) -> AppContext:
    # Created in the lifespan handler of `burgerhero.api.app.create_app`.
    return request.app.state.context  # type: ignore[attr-defined]


def current_user(ctx: AppContext = Depends(app_context)) -> UserProfile:
    user = ctx.auth.user
    if not ctx.auth.is_authed or user is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return user
