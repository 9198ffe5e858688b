"""
burgerhero.stores.auth_store

Single source of truth for "who is logged in".

Responsibilities:
- Hold the current `UserProfile` and the authenticated flag; readable
  synchronously by any handler.
- Persist `{user, is_authed}` on every mutation; `loading` is runtime-only.
- Patch the cached user from the profile store without clobbering local
  edits (`refresh_user_from_db`).
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from burgerhero.auth.models import MUTABLE_PROFILE_FIELDS, UserProfile, is_placeholder
from burgerhero.observability.logging import get_logger
from burgerhero.storage import AUTH_KEY, PersistentStorage

if TYPE_CHECKING:
    from burgerhero.backend.profiles import ProfileClient

log = get_logger(__name__)


class AuthStore:
    def __init__(self, storage: PersistentStorage, profiles: ProfileClient | None = None) -> None:
        self._storage = storage
        self._profiles = profiles
        self.user: UserProfile | None = None
        self.is_authed = False
        # Cleared by the bootstrapper after its first attempt.
        self.loading = True

    async def hydrate(self) -> None:
        data = await self._storage.read(AUTH_KEY) or {}
        raw_user = data.get("user")
        try:
            self.user = UserProfile.from_dict(raw_user) if raw_user else None
        except (KeyError, TypeError):
            log.warning("auth_cache_discarded")
            self.user = None
        # Enforce is_authed <=> user on whatever was persisted.
        self.is_authed = self.user is not None
        if bool(data.get("is_authed")) != self.is_authed:
            await self._persist()

    async def login(self, profile: UserProfile) -> None:
        self.user = profile
        self.is_authed = True
        await self._persist()

    async def logout(self) -> None:
        self.user = None
        self.is_authed = False
        await self._persist()

    async def update_user(self, partial: dict[str, Any]) -> UserProfile | None:
        if self.user is None:
            return None
        unknown = set(partial) - set(MUTABLE_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"cannot update profile fields: {sorted(unknown)}")
        self.user = dataclasses.replace(self.user, **partial)
        await self._persist()
        return self.user

    def finish_loading(self) -> None:
        self.loading = False

    async def refresh_user_from_db(self, user_id: str) -> bool:
        """
        Fill locally missing or placeholder fields from the canonical profile.
        A non-empty local value always wins, and an empty remote value is never
        written. Returns True when anything changed.
        """

        if self.user is None or self.user.id != user_id:
            return False
        if self._profiles is None:
            raise RuntimeError("AuthStore has no profile client bound")

        remote = await self._profiles.fetch_remote_fields(user_id)
        if not remote:
            return False

        patch: dict[str, Any] = {}
        for name, remote_value in remote.items():
            if name not in MUTABLE_PROFILE_FIELDS or is_placeholder(remote_value):
                continue
            if is_placeholder(getattr(self.user, name)):
                patch[name] = remote_value

        if not patch:
            return False
        log.info("auth_user_refreshed", user_id=user_id, fields=sorted(patch))
        await self.update_user(patch)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict() if self.user else None,
            "is_authed": self.is_authed,
        }

    async def _persist(self) -> None:
        await self._storage.write(AUTH_KEY, self.to_dict())


# --- Module Notes -----------------------------------------------------------
# Placeholder detection ("Herói", "N/A", "BH-PENDING", "") mirrors what the UI and the
# profile client write while a real value is unknown; see DESIGN.md for the caveat.
