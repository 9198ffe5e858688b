"""
burgerhero.auth.models

Auth domain models.

Responsibilities:
- Define the closed `Role` enum and its total parsing function.
- Define the identity-provider session types.
- Define the `UserProfile` cached by the auth store.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field, fields
from typing import Any

# Stand-ins written while a real value is still unknown.
PLACEHOLDER_VALUES = frozenset({"", "Herói", "N/A", "BH-PENDING"})

DEFAULT_DISPLAY_NAME = "Herói"
DEFAULT_HERO_THEME = "sombra-noturna"


class Role(enum.StrEnum):
    client = "client"
    staff = "staff"
    admin = "admin"


def parse_role(value: Any) -> Role:
    """
    Total mapping from whatever the backend stored to a `Role`.
    Matching is case-insensitive; anything unrecognised becomes `client`.
    """

    raw = str(value or "").strip().lower()
    try:
        return Role(raw)
    except ValueError:
        return Role.client


def is_placeholder(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() in PLACEHOLDER_VALUES


@dataclass(frozen=True, slots=True)
class SessionUser:
    id: str
    email: str = ""
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SessionUser:
        return cls(
            id=str(payload["id"]),
            email=str(payload.get("email") or ""),
            user_metadata=dict(payload.get("user_metadata") or {}),
        )

    def metadata_str(self, *keys: str) -> str:
        for key in keys:
            value = self.user_metadata.get(key)
            if value:
                return str(value)
        return ""


@dataclass(frozen=True, slots=True)
class Session:
    """
    Credential issued by the identity provider. The app keeps a reference
    only; issuing and revoking belong to the provider.
    """

    access_token: str
    refresh_token: str
    expires_at: int
    user: SessionUser

    def expires_within(self, *, now: float, margin_seconds: int) -> bool:
        return self.expires_at - margin_seconds <= now

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=int(data["expires_at"]),
            user=SessionUser.from_payload(data["user"]),
        )


@dataclass(slots=True)
class UserProfile:
    id: str
    email: str
    role: Role = Role.client
    display_name: str = DEFAULT_DISPLAY_NAME
    cpf: str = ""
    avatar_url: str | None = None
    customer_code: str = ""
    hero_theme: str = DEFAULT_HERO_THEME
    whatsapp: str = ""
    birth_date: str = ""
    settings: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["role"] = parse_role(values.get("role"))
        values["settings"] = dict(values.get("settings") or {})
        return cls(**values)


# Fields a partial update or a remote refresh may touch. `id` and `role` are
# owned by the bootstrap path.
MUTABLE_PROFILE_FIELDS = (
    "display_name",
    "email",
    "cpf",
    "avatar_url",
    "customer_code",
    "hero_theme",
    "whatsapp",
    "birth_date",
    "settings",
)


# --- Module Notes -----------------------------------------------------------
# Role is parsed once at the boundary (profile fetch, persisted cache load) so the
# guard and the API only ever compare enum members.
