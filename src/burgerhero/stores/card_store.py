"""
burgerhero.stores.card_store

Membership-card customization state.

Responsibilities:
- Track the selected template, font, font color and font size.
- Hold the active template list fetched from the backend (never persisted,
  always reloaded) with a built-in fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from burgerhero.storage import CARD_PREFS_KEY, PersistentStorage


@dataclass(frozen=True, slots=True)
class CardTemplate:
    id: str
    image_url: str
    name: str | None = None


INITIAL_TEMPLATES: tuple[CardTemplate, ...] = (
    CardTemplate(
        id="hero-1",
        image_url="https://ik.imagekit.io/lflb43qwh/Heros/1.png?v=2",
        name="Clássico",
    ),
)

DEFAULT_FONT = "Inter, sans-serif"
DEFAULT_COLOR = "#FFFFFF"
DEFAULT_FONT_SIZE = 22


class CardStore:
    def __init__(self, storage: PersistentStorage) -> None:
        self._storage = storage
        self.available_templates: list[CardTemplate] = list(INITIAL_TEMPLATES)
        # Empty means "first available template".
        self.selected_template_id = ""
        self.selected_font = DEFAULT_FONT
        self.selected_color = DEFAULT_COLOR
        self.selected_font_size = DEFAULT_FONT_SIZE

    async def hydrate(self) -> None:
        data = await self._storage.read(CARD_PREFS_KEY) or {}
        self.selected_template_id = str(data.get("selected_template_id") or "")
        self.selected_font = str(data.get("selected_font") or DEFAULT_FONT)
        self.selected_color = str(data.get("selected_color") or DEFAULT_COLOR)
        self.selected_font_size = int(data.get("selected_font_size") or DEFAULT_FONT_SIZE)

    def set_templates(self, templates: list[CardTemplate]) -> None:
        self.available_templates = list(templates) or list(INITIAL_TEMPLATES)

    async def set_all(
        self,
        *,
        template_id: str | None = None,
        font: str | None = None,
        color: str | None = None,
        font_size: int | None = None,
    ) -> None:
        if template_id is not None:
            self.selected_template_id = template_id
        if font is not None:
            self.selected_font = font
        if color is not None:
            self.selected_color = color
        if font_size is not None:
            self.selected_font_size = font_size
        await self._persist()

    def selected_template(self) -> CardTemplate:
        for template in self.available_templates:
            if template.id == self.selected_template_id:
                return template
        if self.available_templates:
            return self.available_templates[0]
        return INITIAL_TEMPLATES[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_template_id": self.selected_template_id,
            "selected_font": self.selected_font,
            "selected_color": self.selected_color,
            "selected_font_size": self.selected_font_size,
        }

    async def _persist(self) -> None:
        await self._storage.write(CARD_PREFS_KEY, self.to_dict())
