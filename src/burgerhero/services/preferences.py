"""
burgerhero.services.preferences

Preference snapshot: local stores <-> remote profile settings.

Responsibilities:
- Push remote `settings` into the theme and card stores and apply the theme.
- Reload the active card templates (failures are logged, never fatal).
- Mirror the current snapshot to the remote profile on explicit save.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from burgerhero.backend.profiles import ProfileClient
from burgerhero.errors import NetworkOrBackendError
from burgerhero.observability.logging import get_logger
from burgerhero.stores.auth_store import AuthStore
from burgerhero.stores.card_store import DEFAULT_COLOR, DEFAULT_FONT, DEFAULT_FONT_SIZE, CardStore
from burgerhero.stores.theme_store import ThemeStore

log = get_logger(__name__)


def _font_size(value: Any) -> int:
    # Remote settings are free-form JSON written by older clients.
    try:
        size = int(value)
    except (TypeError, ValueError):
        return DEFAULT_FONT_SIZE
    return size if size > 0 else DEFAULT_FONT_SIZE


@dataclass(frozen=True, slots=True)
class PreferenceSnapshot:
    hero_theme: str
    color_mode: str
    card_template_id: str | None
    font: str
    font_color: str
    font_size: int

    def to_remote_settings(self) -> dict[str, Any]:
        return {
            "heroTheme": self.hero_theme,
            "mode": self.color_mode,
            "cardTemplateId": self.card_template_id,
            "fontStyle": self.font,
            "fontColor": self.font_color,
            "fontSize": self.font_size,
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PreferencesService:
    def __init__(
        self,
        *,
        theme: ThemeStore,
        card: CardStore,
        auth: AuthStore,
        profiles: ProfileClient,
    ) -> None:
        self._theme = theme
        self._card = card
        self._auth = auth
        self._profiles = profiles

    async def apply_settings(self, settings: dict[str, Any] | None) -> None:
        safe = settings or {}
        await self._theme.set_hero_theme(safe.get("heroTheme") or "")
        await self._theme.set_mode(safe.get("mode") or "system")
        template_id = safe.get("cardTemplateId")
        await self._card.set_all(
            template_id=str(template_id) if template_id else None,
            font=safe.get("fontStyle") or DEFAULT_FONT,
            color=safe.get("fontColor") or DEFAULT_COLOR,
            font_size=_font_size(safe.get("fontSize")),
        )
        self._theme.apply_theme()

    async def refresh_templates(self) -> None:
        try:
            templates = await self._profiles.active_card_templates()
        except NetworkOrBackendError as e:
            log.error("card_templates_unavailable", error=e.message)
            return
        if templates:
            self._card.set_templates(templates)

    def snapshot(self) -> PreferenceSnapshot:
        return PreferenceSnapshot(
            hero_theme=self._theme.hero_theme,
            color_mode=self._theme.mode,
            card_template_id=self._card.selected_template_id or None,
            font=self._card.selected_font,
            font_color=self._card.selected_color,
            font_size=self._card.selected_font_size,
        )

    async def update(
        self,
        *,
        hero_theme: str | None = None,
        color_mode: str | None = None,
        app_font_size: str | None = None,
        card_template_id: str | None = None,
        font: str | None = None,
        font_color: str | None = None,
        font_size: int | None = None,
    ) -> PreferenceSnapshot:
        if hero_theme is not None:
            await self._theme.set_hero_theme(hero_theme)
        if color_mode is not None:
            await self._theme.set_mode(color_mode)
        if app_font_size is not None:
            await self._theme.set_app_font_size(app_font_size)
        await self._card.set_all(
            template_id=card_template_id, font=font, color=font_color, font_size=font_size
        )
        return self.snapshot()

    async def save(self) -> PreferenceSnapshot | None:
        """Mirror the snapshot to the signed-in user's remote profile. No-op when logged out."""

        user = self._auth.user
        if user is None:
            return None
        snapshot = self.snapshot()
        settings = snapshot.to_remote_settings()
        await self._profiles.save_settings(user.id, settings)
        await self._auth.update_user({"settings": settings, "hero_theme": snapshot.hero_theme})
        log.info("preferences_saved", user_id=user.id)
        return snapshot
