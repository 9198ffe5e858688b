"""
burgerhero.services.session_bootstrapper

Turns an identity-provider session into a populated auth store.

Responsibilities:
- `initialize()` once per process: session -> profile -> stores.
- React to auth events (sign-in, token refresh, sign-out).
- Self-heal a missing profile row with exactly one bootstrap-procedure call
  followed by one re-fetch.
- Fail closed: an unrecoverable profile signs the session out and leaves
  the cache `{user: None, is_authed: False}`.
"""

from __future__ import annotations

import asyncio
import dataclasses
import enum
from dataclasses import dataclass

from burgerhero.auth.cpf import is_valid_cpf, normalize_cpf
from burgerhero.auth.models import DEFAULT_DISPLAY_NAME, Session, SessionUser, UserProfile, parse_role
from burgerhero.backend.identity import AuthEvent, IdentityClient, Subscription
from burgerhero.backend.profiles import BootstrapResult, ProfileClient
from burgerhero.errors import AuthFailure, NetworkOrBackendError, ProfileUnrecoverable
from burgerhero.observability.logging import get_logger
from burgerhero.services.preferences import PreferencesService
from burgerhero.stores.auth_store import AuthStore

log = get_logger(__name__)

BUILD_EVENTS = frozenset(
    {
        AuthEvent.initial_session,
        AuthEvent.signed_in,
        AuthEvent.token_refreshed,
        AuthEvent.user_updated,
    }
)

DEFAULT_PROFILE_ERROR = "Could not create your profile. Please try again."


class BootstrapOutcome(enum.StrEnum):
    authenticated = "AUTHENTICATED"
    unauthenticated = "UNAUTHENTICATED"
    signed_out = "SIGNED_OUT"


@dataclass(frozen=True, slots=True)
class SignUpForm:
    name: str
    email: str
    password: str
    cpf: str
    birth_date: str | None = None
    whatsapp: str | None = None


@dataclass(frozen=True, slots=True)
class SignUpResult:
    confirmation_required: bool
    user: UserProfile | None = None


def humanize_bootstrap_message(message: str | None) -> str:
    m = (message or "").lower()
    if "invalid_cpf" in m:
        return "Invalid CPF. Enter a valid CPF to continue."
    if "refresh token" in m:
        return "Inconsistent session. Go back to sign-in and try again."
    if "no_auth" in m or "jwt" in m:
        return "Invalid session. Please sign in again."
    if "bootstrap_failed" in m:
        return DEFAULT_PROFILE_ERROR
    return message or DEFAULT_PROFILE_ERROR


class SessionBootstrapper:
    def __init__(
        self,
        *,
        identity: IdentityClient,
        profiles: ProfileClient,
        auth: AuthStore,
        preferences: PreferencesService,
    ) -> None:
        self._identity = identity
        self._profiles = profiles
        self._auth = auth
        self._preferences = preferences

        # One build at a time, whether it came from initialize() or an event.
        self._lock = asyncio.Lock()
        self._init_task: asyncio.Task[BootstrapOutcome] | None = None
        self._subscription: Subscription | None = None
        self._built_for: str | None = None
        # Bumped by every fail-closed sign-out.
        self._failures = 0
        self.last_error: str | None = None

    # -- wiring --------------------------------------------------------------

    def attach(self) -> None:
        if self._subscription is None:
            self._subscription = self._identity.on_auth_state_change(self.on_auth_event)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    # -- lifecycle -----------------------------------------------------------

    async def initialize(self) -> BootstrapOutcome:
        """
        Single-shot: concurrent and repeated callers all await the first run.
        """

        self.attach()
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize_once())
        return await self._init_task

    async def reload(self) -> BootstrapOutcome:
        """Recovery action: drop the cached user and bootstrap again from the session."""

        async with self._lock:
            self._built_for = None
            await self._auth.logout()
        self._init_task = None
        return await self.initialize()

    async def _initialize_once(self) -> BootstrapOutcome:
        try:
            failures_before = self._failures
            try:
                session = await self._identity.get_session()
            except NetworkOrBackendError as e:
                log.error("session_fetch_failed", error=e.message)
                self.last_error = e.message
                session = None

            if session is None:
                await self._auth.logout()
                if self._failures != failures_before:
                    # A TOKEN_REFRESHED build inside get_session() already failed closed.
                    return BootstrapOutcome.signed_out
                log.info("bootstrap_unauthenticated")
                return BootstrapOutcome.unauthenticated

            # A TOKEN_REFRESHED event raised inside get_session() may have built it already.
            if self._built_for == session.user.id and self._auth.is_authed:
                return BootstrapOutcome.authenticated

            if await self._build_and_accept(session.user):
                return BootstrapOutcome.authenticated
            return BootstrapOutcome.signed_out
        finally:
            self._auth.finish_loading()

    async def on_auth_event(self, event: AuthEvent, session: Session | None) -> None:
        if event is AuthEvent.signed_out or session is None:
            self._built_for = None
            await self._auth.logout()
            return
        if event is AuthEvent.token_refreshed and (
            self._built_for == session.user.id or self._lock.locked()
        ):
            # New token, same user: the profile is current or a build is already running
            # (profile calls refresh the token from inside that build).
            return
        if event in BUILD_EVENTS:
            await self._build_and_accept(session.user)

    # -- profile -------------------------------------------------------------

    async def build_profile(self, user: SessionUser) -> UserProfile:
        profile = await self._profiles.fetch_profile(user)
        if profile is None:
            log.warning("profile_missing_attempting_repair", user_id=user.id)
            result = await self._repair(user)
            profile = await self._profiles.fetch_profile(user)
            if profile is None:
                raise ProfileUnrecoverable(humanize_bootstrap_message(result.message))
        return dataclasses.replace(profile, role=parse_role(profile.role))

    async def _repair(self, user: SessionUser) -> BootstrapResult:
        name = (
            user.metadata_str("full_name", "name")
            or (user.email.split("@")[0] if user.email else "")
            or DEFAULT_DISPLAY_NAME
        )
        try:
            result = await self._profiles.ensure_user_bootstrap(
                name=name,
                email=user.email,
                cpf=normalize_cpf(user.metadata_str("cpf")),
                birthdate=user.metadata_str("birthdate", "birth_date") or None,
                whatsapp=user.metadata_str("whatsapp") or None,
            )
        except NetworkOrBackendError as e:
            result = BootstrapResult(ok=False, message=e.message)
        log.info("profile_repair_result", user_id=user.id, ok=result.ok, message=result.message)
        return result

    async def _build_and_accept(self, user: SessionUser) -> bool:
        try:
            async with self._lock:
                profile = await self.build_profile(user)
                await self._accept(profile)
        except (ProfileUnrecoverable, NetworkOrBackendError) as e:
            # Outside the lock: sign_out() re-enters on_auth_event with SIGNED_OUT.
            await self._fail_closed(user, e.message, type(e).__name__)
            return False
        except Exception as e:
            # A malformed profile row must not leave a live session without a user.
            log.exception("profile_build_crashed", user_id=user.id)
            await self._fail_closed(user, DEFAULT_PROFILE_ERROR, type(e).__name__)
            return False
        return True

    async def _accept(self, profile: UserProfile) -> None:
        await self._preferences.apply_settings(profile.settings)
        await self._preferences.refresh_templates()
        await self._auth.login(profile)
        self._built_for = profile.id
        self.last_error = None
        log.info("session_bootstrapped", user_id=profile.id, role=profile.role.value)

    async def _fail_closed(self, user: SessionUser, message: str, error_type: str) -> None:
        log.error(
            "profile_unrecoverable_signing_out",
            user_id=user.id,
            error_type=error_type,
            error=message,
        )
        self.last_error = message
        self._failures += 1
        self._built_for = None
        await self._identity.sign_out()
        await self._auth.logout()

    # -- explicit user actions ----------------------------------------------

    async def sign_in(self, email: str, password: str) -> UserProfile:
        self.attach()
        self.last_error = None
        # Profile population happens in on_auth_event(SIGNED_IN) before this returns.
        await self._identity.sign_in_with_password(email, password)
        if not self._auth.is_authed or self._auth.user is None:
            raise ProfileUnrecoverable(self.last_error or DEFAULT_PROFILE_ERROR)
        return self._auth.user

    async def sign_up(self, form: SignUpForm) -> SignUpResult:
        self.attach()
        self.last_error = None
        cpf = normalize_cpf(form.cpf)
        if not is_valid_cpf(cpf):
            raise AuthFailure("Invalid CPF. Enter a valid CPF to continue.")
        if await self._profiles.cpf_exists(cpf):
            raise AuthFailure("This CPF is already registered.")

        response = await self._identity.sign_up(
            form.email,
            form.password,
            {
                "full_name": form.name,
                "cpf": cpf,
                "birthdate": form.birth_date or None,
                "whatsapp": form.whatsapp or None,
            },
        )
        if response.session is None:
            log.info("sign_up_confirmation_required")
            return SignUpResult(confirmation_required=True)
        if not self._auth.is_authed or self._auth.user is None:
            raise ProfileUnrecoverable(self.last_error or DEFAULT_PROFILE_ERROR)
        return SignUpResult(confirmation_required=False, user=self._auth.user)

    async def sign_out(self) -> None:
        await self._identity.sign_out()
        await self._auth.logout()
        self._built_for = None
        self.last_error = None


# --- Module Notes -----------------------------------------------------------
# Sign-up needs no explicit bootstrap call: the SIGNED_IN event finds no profile and the
# repair path runs `ensure_user_bootstrap` with the metadata passed to the provider.
