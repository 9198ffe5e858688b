"""
tests.conftest

Shared fixtures.

Responsibilities:
- `FakeSupabase`: an in-process stand-in for GoTrue + PostgREST, served
  through `httpx.MockTransport` so the real clients run unmodified.
- Builders for settings and `AppContext` instances backed by MemoryStorage.
"""

from __future__ import annotations

import itertools
import json
import time
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import jwt
import pytest

from burgerhero.context import AppContext, build_context
from burgerhero.settings import Settings
from burgerhero.storage import MemoryStorage

SUPABASE_URL = "http://supabase.test"


def _json(status: int, body: Any = None) -> httpx.Response:
    if body is None:
        return httpx.Response(status)
    return httpx.Response(status, json=body)


def _eq(params: httpx.QueryParams, name: str) -> str | None:
    value = params.get(name)
    if value is None or not value.startswith("eq."):
        return None
    return value[3:]


class FakeSupabase:
    def __init__(self) -> None:
        self.accounts: dict[str, dict[str, Any]] = {}
        self.app_users: dict[str, dict[str, Any]] = {}
        self.client_profiles: dict[str, dict[str, Any]] = {}
        self.templates: list[dict[str, Any]] = []
        self.refresh_tokens: dict[str, str] = {}
        self.access_tokens: dict[str, str] = {}

        self.bootstrap_result: dict[str, Any] = {"ok": True, "message": "ok"}
        # When True the procedure actually creates the app_users/client_profiles rows.
        self.bootstrap_creates_profile = False
        self.require_email_confirmation = False
        # Path prefixes answered with 503.
        self.failing_paths: set[str] = set()
        # Access tokens PostgREST answers with 401 "JWT expired".
        self.expired_access_tokens: set[str] = set()

        self.requests: list[httpx.Request] = []
        self.rpc_payloads: list[dict[str, Any]] = []
        self._counter = itertools.count(1)

    # -- seeding -------------------------------------------------------------

    def add_user(
        self,
        email: str,
        password: str = "secret123",
        *,
        role: str | None = "client",
        profile: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        user_id = str(uuid.uuid4())
        self.accounts[email] = {
            "id": user_id,
            "email": email,
            "password": password,
            "user_metadata": metadata or {},
        }
        if role is not None:
            self.app_users[user_id] = {"role": role, "is_active": True}
        if profile is not None:
            self.client_profiles[user_id] = {"user_id": user_id, **profile}
        return user_id

    def issue_session(self, email: str, *, expires_in: int = 3600) -> dict[str, Any]:
        account = self.accounts[email]
        n = next(self._counter)
        refresh_token = f"rt-{n}"
        self.refresh_tokens[refresh_token] = email
        self.access_tokens[f"at-{n}"] = email
        return {
            "access_token": f"at-{n}",
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": expires_in,
            "expires_at": int(time.time()) + expires_in,
            "user": {
                "id": account["id"],
                "email": email,
                "user_metadata": account["user_metadata"],
            },
        }

    # -- inspection ----------------------------------------------------------

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    # -- transport -----------------------------------------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if any(path.startswith(p) for p in self.failing_paths):
            return _json(503, {"message": "service unavailable"})
        body = json.loads(request.content) if request.content else {}
        if path.startswith("/rest/v1/"):
            token = request.headers.get("authorization", "").removeprefix("Bearer ")
            if token in self.expired_access_tokens:
                return _json(401, {"code": "PGRST301", "message": "JWT expired"})

        if path == "/auth/v1/token":
            return self._token(request.url.params.get("grant_type"), body)
        if path == "/auth/v1/signup":
            return self._signup(body)
        if path == "/auth/v1/logout":
            return _json(204)
        if path == "/rest/v1/app_users":
            user_id = _eq(request.url.params, "id")
            row = self.app_users.get(user_id or "")
            return _json(200, [row] if row else [])
        if path == "/rest/v1/client_profiles":
            if request.method == "PATCH":
                return self._patch_profile(request.url.params, body)
            return _json(200, self._select_profiles(request.url.params))
        if path == "/rest/v1/hero_card_templates":
            return _json(200, [t for t in self.templates if t.get("is_active", True)])
        if path == "/rest/v1/rpc/ensure_user_bootstrap":
            return self._bootstrap(request, body)
        return _json(404, {"message": f"no route {path}"})

    def _token(self, grant_type: str | None, body: dict[str, Any]) -> httpx.Response:
        if grant_type == "password":
            account = self.accounts.get(body.get("email", ""))
            if account is None or account["password"] != body.get("password"):
                return _json(
                    400, {"error": "invalid_grant", "error_description": "Invalid login credentials"}
                )
            return _json(200, self.issue_session(account["email"]))
        if grant_type == "refresh_token":
            email = self.refresh_tokens.pop(body.get("refresh_token", ""), None)
            if email is None:
                return _json(400, {"error": "invalid_grant", "error_description": "Invalid Refresh Token"})
            return _json(200, self.issue_session(email))
        return _json(400, {"error": "unsupported_grant_type"})

    def _signup(self, body: dict[str, Any]) -> httpx.Response:
        email = body["email"]
        if email in self.accounts:
            return _json(422, {"code": 422, "msg": "User already registered"})
        self.add_user(email, body["password"], role=None, metadata=body.get("data") or {})
        if self.require_email_confirmation:
            account = self.accounts[email]
            return _json(200, {"id": account["id"], "email": email, "user_metadata": account["user_metadata"]})
        return _json(200, self.issue_session(email))

    def _select_profiles(self, params: httpx.QueryParams) -> list[dict[str, Any]]:
        rows = list(self.client_profiles.values())
        for column in ("user_id", "cpf", "customer_id_public"):
            value = _eq(params, column)
            if value is not None:
                rows = [r for r in rows if str(r.get(column)) == value]
        return rows[:1] if params.get("limit") == "1" else rows

    def _patch_profile(self, params: httpx.QueryParams, body: dict[str, Any]) -> httpx.Response:
        user_id = _eq(params, "user_id") or ""
        if user_id in self.client_profiles:
            self.client_profiles[user_id].update(body)
        return _json(204)

    def _bootstrap(self, request: httpx.Request, body: dict[str, Any]) -> httpx.Response:
        self.rpc_payloads.append(body)
        if self.bootstrap_creates_profile:
            token = request.headers.get("authorization", "").removeprefix("Bearer ")
            account = self._account_for_token(token)
            if account is not None:
                user_id = account["id"]
                self.app_users.setdefault(user_id, {"role": "client", "is_active": True})
                self.client_profiles.setdefault(
                    user_id,
                    {
                        "user_id": user_id,
                        "display_name": body["p_display_name"],
                        "cpf": body["p_cpf"],
                        "hero_code": "HE001",
                        "settings": {},
                    },
                )
        return _json(200, [self.bootstrap_result])

    def _account_for_token(self, token: str) -> dict[str, Any] | None:
        email = self.access_tokens.get(token)
        return self.accounts.get(email) if email else None


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "env": "test",
        "supabase_url": SUPABASE_URL,
        "supabase_anon_key": "anon-test-key",
    }
    values.update(overrides)
    return Settings(**values)


ContextFactory = Callable[..., Awaitable[AppContext]]


@pytest.fixture
def fake_backend() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def context_factory(fake_backend: FakeSupabase, settings: Settings) -> ContextFactory:
    async def _build(
        *,
        storage: MemoryStorage | None = None,
        start: bool = True,
        settings_override: Settings | None = None,
    ) -> AppContext:
        ctx = await build_context(
            settings_override or settings,
            storage=storage if storage is not None else MemoryStorage(),
            transport=fake_backend.transport(),
        )
        if start:
            await ctx.start()
        return ctx

    return _build


@pytest.fixture
def mint_token() -> Callable[..., str]:
    """HS256 access tokens in GoTrue's claim shape."""

    def _mint(
        secret: str,
        *,
        subject: str = "u1",
        email: str = "",
        ttl: timedelta = timedelta(hours=1),
        audience: str = "authenticated",
    ) -> str:
        now = datetime.now(tz=UTC)
        payload = {
            "aud": audience,
            "sub": subject,
            "email": email,
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _mint
