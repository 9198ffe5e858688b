"""
tests.test_preferences

Theme/card stores and the preference snapshot mirrored to the profile.
"""

from __future__ import annotations

import pytest

from burgerhero.auth.models import DEFAULT_HERO_THEME
from burgerhero.storage import CARD_PREFS_KEY, THEME_KEY, MemoryStorage
from burgerhero.stores.card_store import INITIAL_TEMPLATES, CardStore, CardTemplate
from burgerhero.stores.theme_store import ThemeStore, normalize_color_mode, normalize_hero_theme


@pytest.mark.asyncio
async def test_apply_theme_is_idempotent() -> None:
    theme = ThemeStore(MemoryStorage())
    theme.root.classes.update({"antialiased", "theme-old"})
    await theme.set_hero_theme("aurora-rosa")
    await theme.set_mode("dark")

    first = theme.apply_theme().to_dict()
    second = theme.apply_theme().to_dict()

    assert first == second
    assert first["classes"] == ["antialiased", "dark", "theme-aurora-rosa"]
    assert first["style"] == {"--app-font-size": "1rem"}


@pytest.mark.asyncio
async def test_switching_modes_toggles_dark_class() -> None:
    theme = ThemeStore(MemoryStorage(), system_prefers_dark=True)

    await theme.set_mode("dark")
    assert "dark" in theme.root.classes
    await theme.set_mode("light")
    assert "dark" not in theme.root.classes
    await theme.set_mode("system")
    assert "dark" in theme.root.classes


@pytest.mark.asyncio
async def test_theme_store_persists_and_hydrates() -> None:
    storage = MemoryStorage()
    theme = ThemeStore(storage)
    await theme.set_hero_theme("verde-neon")
    await theme.set_app_font_size("large")

    restored = ThemeStore(storage)
    await restored.hydrate()

    assert storage.data[THEME_KEY]["hero_theme"] == "verde-neon"
    assert restored.hero_theme == "verde-neon"
    assert restored.apply_theme().style["--app-font-size"] == "1.1rem"


@pytest.mark.asyncio
async def test_unknown_font_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        await ThemeStore(MemoryStorage()).set_app_font_size("huge")


def test_normalizers_fall_back_to_defaults() -> None:
    assert normalize_hero_theme("Tita-Dourado") == "tita-dourado"
    assert normalize_hero_theme("unknown") == DEFAULT_HERO_THEME
    assert normalize_hero_theme(None) == DEFAULT_HERO_THEME
    assert normalize_color_mode("DARK") == "dark"
    assert normalize_color_mode("sepia") == "system"


@pytest.mark.asyncio
async def test_card_store_falls_back_to_first_template() -> None:
    storage = MemoryStorage()
    card = CardStore(storage)

    assert card.selected_template() == INITIAL_TEMPLATES[0]

    card.set_templates([CardTemplate("a", "https://img/a.png"), CardTemplate("b", "https://img/b.png")])
    await card.set_all(template_id="missing", font_size=30)
    assert card.selected_template().id == "a"
    assert storage.data[CARD_PREFS_KEY]["selected_font_size"] == 30

    card.set_templates([])
    assert card.available_templates == list(INITIAL_TEMPLATES)


@pytest.mark.asyncio
async def test_save_is_noop_when_logged_out(context_factory, fake_backend) -> None:
    ctx = await context_factory()

    assert await ctx.preferences.save() is None
    assert fake_backend.count("PATCH", "/rest/v1/client_profiles") == 0
    await ctx.close()


@pytest.mark.asyncio
async def test_save_mirrors_snapshot_to_profile_and_cache(context_factory, fake_backend) -> None:
    user_id = fake_backend.add_user("ana@example.com", profile={"display_name": "Ana", "hero_code": "HE1"})
    ctx = await context_factory()
    await ctx.bootstrapper.sign_in("ana@example.com", "secret123")

    await ctx.preferences.update(hero_theme="azul-eletrico", color_mode="dark", font_color="#FF0000")
    snapshot = await ctx.preferences.save()

    assert snapshot is not None
    remote = fake_backend.client_profiles[user_id]["settings"]
    assert remote["heroTheme"] == "azul-eletrico"
    assert remote["mode"] == "dark"
    assert remote["fontColor"] == "#FF0000"
    assert ctx.auth.user is not None
    assert ctx.auth.user.hero_theme == "azul-eletrico"
    assert ctx.auth.user.settings == remote
    await ctx.close()


@pytest.mark.asyncio
async def test_template_outage_keeps_fallback(context_factory, fake_backend) -> None:
    fake_backend.add_user("ana@example.com", profile={"display_name": "Ana", "hero_code": "HE1"})
    fake_backend.failing_paths.add("/rest/v1/hero_card_templates")
    ctx = await context_factory()

    await ctx.bootstrapper.sign_in("ana@example.com", "secret123")

    assert ctx.auth.is_authed
    assert ctx.card.available_templates == list(INITIAL_TEMPLATES)
    await ctx.close()
