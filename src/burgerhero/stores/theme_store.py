"""
burgerhero.stores.theme_store

Theme preferences and their application to the document root.

Responsibilities:
- Track color mode, hero theme and app font size.
- `apply_theme()` rewrites the root's theme classes, the `dark` class and the
  `--app-font-size` variable. Calling it repeatedly yields the same root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from burgerhero.auth.models import DEFAULT_HERO_THEME
from burgerhero.storage import THEME_KEY, PersistentStorage

ColorMode = Literal["system", "light", "dark"]
FontSize = Literal["small", "medium", "large"]

COLOR_MODES: tuple[str, ...] = ("system", "light", "dark")

HERO_THEMES: tuple[str, ...] = (
    "sombra-noturna",
    "guardiao-escarlate",
    "tita-dourado",
    "tempestade-azul",
    "sentinela-verde",
    "aurora-rosa",
    "vermelho-heroi",
    "verde-neon",
    "laranja-vulcanico",
    "azul-eletrico",
    "preto-absoluto",
)

FONT_SIZE_REM: dict[str, str] = {
    "small": "0.9rem",
    "medium": "1rem",
    "large": "1.1rem",
}


def normalize_hero_theme(value: Any) -> str:
    theme = str(value or "").strip().lower()
    return theme if theme in HERO_THEMES else DEFAULT_HERO_THEME


def normalize_color_mode(value: Any) -> ColorMode:
    mode = str(value or "").strip().lower()
    return mode if mode in COLOR_MODES else "system"  # type: ignore[return-value]


@dataclass(slots=True)
class DocumentRoot:
    """The bits of `document.documentElement` the theme touches."""

    classes: set[str] = field(default_factory=set)
    style: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"classes": sorted(self.classes), "style": dict(self.style)}


class ThemeStore:
    def __init__(self, storage: PersistentStorage, *, system_prefers_dark: bool = False) -> None:
        self._storage = storage
        self._system_prefers_dark = system_prefers_dark
        self.mode: ColorMode = "light"
        self.hero_theme: str = DEFAULT_HERO_THEME
        self.app_font_size: FontSize = "medium"
        self.root = DocumentRoot()

    async def hydrate(self) -> None:
        data = await self._storage.read(THEME_KEY) or {}
        if "mode" in data:
            self.mode = normalize_color_mode(data["mode"])
        if "hero_theme" in data:
            self.hero_theme = normalize_hero_theme(data["hero_theme"])
        if data.get("app_font_size") in FONT_SIZE_REM:
            self.app_font_size = data["app_font_size"]

    async def set_mode(self, mode: str) -> None:
        self.mode = normalize_color_mode(mode)
        await self._persist()
        self.apply_theme()

    async def set_hero_theme(self, theme: str) -> None:
        self.hero_theme = normalize_hero_theme(theme)
        await self._persist()
        self.apply_theme()

    async def set_app_font_size(self, size: str) -> None:
        if size not in FONT_SIZE_REM:
            raise ValueError(f"unknown font size: {size!r}")
        self.app_font_size = size  # type: ignore[assignment]
        await self._persist()
        self.apply_theme()

    def apply_theme(self) -> DocumentRoot:
        classes = {c for c in self.root.classes if not c.startswith("theme-")}
        classes.add(f"theme-{self.hero_theme}")

        if self.mode == "dark":
            dark = True
        elif self.mode == "light":
            dark = False
        else:
            dark = self._system_prefers_dark
        if dark:
            classes.add("dark")
        else:
            classes.discard("dark")

        self.root.classes = classes
        self.root.style["--app-font-size"] = FONT_SIZE_REM.get(self.app_font_size, "1rem")
        return self.root

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "hero_theme": self.hero_theme,
            "app_font_size": self.app_font_size,
        }

    async def _persist(self) -> None:
        await self._storage.write(THEME_KEY, self.to_dict())
