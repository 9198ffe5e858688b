"""
burgerhero.backend.profiles

Profile store client (PostgREST tables + stored procedures).

Responsibilities:
- Load a user's role (`app_users`) and optional client profile
  (`client_profiles`) and assemble a `UserProfile`.
- Call the idempotent `ensure_user_bootstrap` procedure.
- Assign a public customer code when a profile has none.
- Mirror preference settings and read active card templates.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import Any

import httpx

from burgerhero.auth.models import (
    DEFAULT_DISPLAY_NAME,
    SessionUser,
    UserProfile,
    parse_role,
)
from burgerhero.backend.http import api_headers, first_row, raise_for_backend, send
from burgerhero.backend.identity import IdentityClient
from burgerhero.errors import NetworkOrBackendError
from burgerhero.observability.logging import get_logger
from burgerhero.settings import Settings
from burgerhero.stores.card_store import CardTemplate
from burgerhero.stores.theme_store import normalize_hero_theme

log = get_logger(__name__)

CLIENT_PROFILE_COLUMNS = (
    "display_name,hero_code,customer_id_public,avatar_url,cpf,whatsapp,birthdate,settings"
)
CUSTOMER_CODE_ALPHABET = string.ascii_uppercase + string.digits
CUSTOMER_CODE_PENDING = "BH-PENDING"
NO_CUSTOMER_CODE = "N/A"


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    ok: bool
    message: str = ""


def generate_customer_code() -> str:
    return "BH-" + "".join(secrets.choice(CUSTOMER_CODE_ALPHABET) for _ in range(6))


def remote_profile_fields(row: dict[str, Any]) -> dict[str, Any]:
    """Map a `client_profiles` row onto `UserProfile` field names, without fallbacks."""

    return {
        "display_name": row.get("display_name") or "",
        "customer_code": row.get("customer_id_public") or row.get("hero_code") or "",
        "avatar_url": row.get("avatar_url") or None,
        "cpf": row.get("cpf") or "",
        "whatsapp": row.get("whatsapp") or "",
        "birth_date": row.get("birthdate") or "",
    }


class ProfileClient:
    def __init__(
        self,
        *,
        settings: Settings,
        http: httpx.AsyncClient,
        identity: IdentityClient,
    ) -> None:
        self._settings = settings
        self._http = http
        self._identity = identity

    def _url(self, path: str) -> str:
        return self._settings.supabase_url.rstrip("/") + "/rest/v1" + path

    async def _headers(self, **extra: str) -> dict[str, str]:
        # get_session() refreshes an expiring access token before it is sent.
        session = await self._identity.get_session()
        headers = api_headers(
            anon_key=self._settings.supabase_anon_key,
            access_token=session.access_token if session else None,
        )
        headers.update(extra)
        return headers

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        headers = await self._headers()
        r = await send(self._http, "GET", self._url(f"/{table}"), params=params, headers=headers)
        raise_for_backend(r)
        body = r.json()
        return body if isinstance(body, list) else []

    # -- reads ---------------------------------------------------------------

    async def fetch_app_user(self, user_id: str) -> dict[str, Any] | None:
        rows = await self._select(
            "app_users", {"select": "role,is_active", "id": f"eq.{user_id}", "limit": "1"}
        )
        return rows[0] if rows else None

    async def fetch_client_profile(self, user_id: str) -> dict[str, Any] | None:
        rows = await self._select(
            "client_profiles",
            {"select": CLIENT_PROFILE_COLUMNS, "user_id": f"eq.{user_id}", "limit": "1"},
        )
        return rows[0] if rows else None

    async def fetch_profile(self, user: SessionUser) -> UserProfile | None:
        """
        Returns None when the user has no `app_users` row (profile absent).
        The client profile is optional: staff and admins may not have one.
        """

        app_user = await self.fetch_app_user(user.id)
        if app_user is None:
            log.warning("app_user_missing", user_id=user.id)
            return None

        try:
            client_row = await self.fetch_client_profile(user.id)
        except NetworkOrBackendError as e:
            log.warning("client_profile_unavailable", user_id=user.id, error=e.message)
            client_row = None

        remote = remote_profile_fields(client_row or {})
        customer_code = remote["customer_code"]
        if client_row is None:
            customer_code = NO_CUSTOMER_CODE
        elif not customer_code:
            customer_code = await self.ensure_customer_code(user.id)

        settings = dict((client_row or {}).get("settings") or {})
        return UserProfile(
            id=user.id,
            email=user.email,
            role=parse_role(app_user.get("role")),
            display_name=(
                remote["display_name"]
                or user.metadata_str("full_name", "name")
                or (user.email.split("@")[0] if user.email else "")
                or DEFAULT_DISPLAY_NAME
            ),
            cpf=remote["cpf"],
            avatar_url=remote["avatar_url"] or user.metadata_str("avatar_url") or None,
            customer_code=customer_code,
            hero_theme=normalize_hero_theme(settings.get("heroTheme")),
            whatsapp=remote["whatsapp"],
            birth_date=remote["birth_date"],
            settings=settings,
        )

    async def fetch_remote_fields(self, user_id: str) -> dict[str, Any] | None:
        row = await self.fetch_client_profile(user_id)
        return remote_profile_fields(row) if row is not None else None

    async def cpf_exists(self, cpf: str) -> bool:
        rows = await self._select("client_profiles", {"select": "cpf", "cpf": f"eq.{cpf}", "limit": "1"})
        return bool(rows)

    async def active_card_templates(self) -> list[CardTemplate]:
        rows = await self._select(
            "hero_card_templates",
            {"select": "*", "is_active": "eq.true", "order": "created_at.asc"},
        )
        templates = []
        for row in rows:
            if not row.get("id"):
                log.warning("card_template_without_id_skipped")
                continue
            templates.append(
                CardTemplate(id=str(row["id"]), image_url=str(row.get("preview_url") or ""), name=row.get("name"))
            )
        return templates

    # -- writes --------------------------------------------------------------

    async def ensure_user_bootstrap(
        self,
        *,
        name: str,
        email: str,
        cpf: str,
        birthdate: str | None = None,
        whatsapp: str | None = None,
    ) -> BootstrapResult:
        r = await send(
            self._http,
            "POST",
            self._url("/rpc/ensure_user_bootstrap"),
            headers=await self._headers(),
            json={
                "p_display_name": name,
                "p_email": email,
                "p_cpf": cpf,
                "p_birthdate": birthdate or None,
                "p_whatsapp": whatsapp or None,
            },
        )
        raise_for_backend(r)
        row = first_row(r.json())
        if row is None:
            return BootstrapResult(ok=True, message="ok")
        return BootstrapResult(ok=bool(row.get("ok")), message=str(row.get("message") or ""))

    async def save_settings(self, user_id: str, settings: dict[str, Any]) -> None:
        r = await send(
            self._http,
            "PATCH",
            self._url("/client_profiles"),
            params={"user_id": f"eq.{user_id}"},
            headers=await self._headers(Prefer="return=minimal"),
            json={"settings": settings},
        )
        raise_for_backend(r)

    async def ensure_customer_code(self, user_id: str) -> str:
        for attempt in range(1, self._settings.customer_code_max_attempts + 1):
            candidate = generate_customer_code()
            taken = await self._select(
                "client_profiles",
                {"select": "user_id", "customer_id_public": f"eq.{candidate}", "limit": "1"},
            )
            if taken:
                continue
            r = await send(
                self._http,
                "PATCH",
                self._url("/client_profiles"),
                params={"user_id": f"eq.{user_id}"},
                headers=await self._headers(Prefer="return=minimal"),
                json={"customer_id_public": candidate},
            )
            if r.is_success:
                return candidate
            log.warning("customer_code_save_failed", user_id=user_id, attempt=attempt, status=r.status_code)

        # Sign-in must not block on this; the placeholder is replaced by a later refresh.
        log.error("customer_code_exhausted", user_id=user_id)
        return CUSTOMER_CODE_PENDING


# --- Module Notes -----------------------------------------------------------
# Requests carry the session's access token when one exists so row-level security
# policies see the signed-in user; anonymous reads (CPF checks) fall back to the anon key.
