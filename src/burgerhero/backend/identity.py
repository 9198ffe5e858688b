"""
burgerhero.backend.identity

Identity-provider client (GoTrue REST API).

Responsibilities:
- Sign in with password, sign up, sign out.
- Hold the current session, persist it, and refresh it transparently when
  the access token is about to expire.
- Publish auth events (SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, ...) to
  subscribers, awaiting each one in subscription order.
"""

from __future__ import annotations

import asyncio
import enum
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from burgerhero.auth.jwt import JwtConfig, JwtValidationError, token_expiry
from burgerhero.auth.models import Session, SessionUser
from burgerhero.backend.http import api_headers, error_message, raise_for_backend, send
from burgerhero.errors import AuthFailure, NetworkOrBackendError
from burgerhero.observability.logging import get_logger
from burgerhero.settings import Settings
from burgerhero.storage import SESSION_KEY, PersistentStorage

log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


class AuthEvent(enum.StrEnum):
    initial_session = "INITIAL_SESSION"
    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"
    token_refreshed = "TOKEN_REFRESHED"
    user_updated = "USER_UPDATED"


AuthListener = Callable[[AuthEvent, Session | None], Awaitable[None]]


@dataclass(slots=True)
class Subscription:
    _client: IdentityClient
    _listener: AuthListener

    def unsubscribe(self) -> None:
        self._client._remove_listener(self._listener)


@dataclass(frozen=True, slots=True)
class SignUpResponse:
    user: SessionUser | None
    # None when the project requires e-mail confirmation before the first sign-in.
    session: Session | None


class IdentityClient:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        storage: PersistentStorage,
    ) -> None:
        self._settings = settings
        self._http = http
        self._storage = storage
        self._jwt = JwtConfig(
            audience=settings.jwt_audience,
            secret=settings.supabase_jwt_secret,
        )
        self._session: Session | None = None
        self._listeners: list[AuthListener] = []
        self._refresh_lock = asyncio.Lock()

    # -- subscriptions -------------------------------------------------------

    def on_auth_state_change(self, listener: AuthListener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: AuthListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self, event: AuthEvent, session: Session | None) -> None:
        log.info("auth_event", auth_event=event.value, user_id=session.user.id if session else None)
        for listener in list(self._listeners):
            await listener(event, session)

    # -- session -------------------------------------------------------------

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    async def restore(self) -> None:
        data = await self._storage.read(SESSION_KEY)
        if not data:
            return
        try:
            self._session = Session.from_dict(data)
        except (KeyError, TypeError, ValueError):
            log.warning("stored_session_discarded")
            await self._storage.remove(SESSION_KEY)

    def _is_stale(self, session: Session) -> bool:
        return session.expires_within(
            now=time.time(), margin_seconds=self._settings.session_refresh_margin_seconds
        )

    async def get_session(self) -> Session | None:
        """
        Current session, refreshed first when the access token is about to expire.
        Every backend call goes through here, so tokens never go stale mid-process.
        """

        session = self._session
        if session is None or not self._is_stale(session):
            return session

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited; refresh tokens are single-use.
            current = self._session
            if current is None or not self._is_stale(current):
                return current
            refreshed = await self._refresh(current)

        # Listeners run outside the lock and may end the session (fail-closed sign-out).
        if refreshed is None:
            await self._notify(AuthEvent.signed_out, None)
        else:
            await self._notify(AuthEvent.token_refreshed, refreshed)
        return self._session

    async def _refresh(self, session: Session) -> Session | None:
        r = await send(
            self._http,
            "POST",
            self._url("/auth/v1/token"),
            params={"grant_type": "refresh_token"},
            headers=self._headers(),
            json={"refresh_token": session.refresh_token},
        )
        if r.status_code in (400, 401, 403):
            # Refresh token revoked or already used: the session is gone.
            log.warning("session_refresh_rejected", reason=error_message(r))
            await self._drop_session()
            return None
        raise_for_backend(r)
        refreshed = self._parse_session(r.json())
        await self._store_session(refreshed)
        return refreshed

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        r = await send(
            self._http,
            "POST",
            self._url("/auth/v1/token"),
            params={"grant_type": "password"},
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        if r.status_code in (400, 401, 422):
            message = error_message(r)
            raise AuthFailure(
                "Invalid credentials." if message == INVALID_CREDENTIALS else message
            )
        raise_for_backend(r)
        session = self._parse_session(r.json())
        await self._set_session(session, AuthEvent.signed_in)
        return session

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> SignUpResponse:
        r = await send(
            self._http,
            "POST",
            self._url("/auth/v1/signup"),
            headers=self._headers(),
            json={"email": email, "password": password, "data": metadata or {}},
        )
        if r.status_code in (400, 422):
            message = error_message(r)
            if "already registered" in message.lower():
                message = "E-mail already registered. Sign in instead."
            raise AuthFailure(message)
        raise_for_backend(r)

        body = r.json()
        if body.get("access_token"):
            session = self._parse_session(body)
            await self._set_session(session, AuthEvent.signed_in)
            return SignUpResponse(user=session.user, session=session)

        user_payload = body.get("user") or (body if body.get("id") else None)
        user = SessionUser.from_payload(user_payload) if user_payload else None
        return SignUpResponse(user=user, session=None)

    async def sign_out(self) -> None:
        session = self._session
        if session is not None:
            try:
                r = await send(
                    self._http,
                    "POST",
                    self._url("/auth/v1/logout"),
                    headers=self._headers(session.access_token),
                )
                raise_for_backend(r)
            except NetworkOrBackendError as e:
                # Local sign-out must still happen; the token expires on its own.
                log.warning("remote_sign_out_failed", error=e.message)
        await self._clear_session()

    async def _store_session(self, session: Session) -> None:
        self._session = session
        await self._storage.write(SESSION_KEY, session.to_dict())

    async def _drop_session(self) -> None:
        self._session = None
        await self._storage.remove(SESSION_KEY)

    async def _set_session(self, session: Session, event: AuthEvent) -> None:
        await self._store_session(session)
        await self._notify(event, session)

    async def _clear_session(self) -> None:
        await self._drop_session()
        await self._notify(AuthEvent.signed_out, None)

    # -- helpers -------------------------------------------------------------

    def _url(self, path: str) -> str:
        return self._settings.supabase_url.rstrip("/") + path

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return api_headers(anon_key=self._settings.supabase_anon_key, access_token=access_token)

    def _parse_session(self, body: dict[str, Any]) -> Session:
        try:
            access_token = str(body["access_token"])
            user = SessionUser.from_payload(body["user"])
        except (KeyError, TypeError) as e:
            raise NetworkOrBackendError(f"Malformed session response: missing {e}") from e

        expires_at = None if self._jwt.secret else body.get("expires_at")
        if expires_at is None and not self._jwt.secret and body.get("expires_in") is not None:
            expires_at = int(time.time()) + int(body["expires_in"])
        if expires_at is None:
            # With a configured secret this is also the signature check.
            try:
                expires_at = token_expiry(cfg=self._jwt, token=access_token)
            except JwtValidationError as e:
                raise NetworkOrBackendError(f"Unusable access token: {e}") from e

        return Session(
            access_token=access_token,
            refresh_token=str(body.get("refresh_token") or ""),
            expires_at=int(expires_at),
            user=user,
        )


# --- Module Notes -----------------------------------------------------------
# Listeners run inline: when sign_in_with_password returns, every subscriber (the
# session bootstrapper in particular) has already reacted to SIGNED_IN. The same holds
# for TOKEN_REFRESHED inside get_session(), which therefore returns the session as the
# listeners left it.
