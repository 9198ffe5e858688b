"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts on SQLite storage and the readiness probe
  reports ready once the first bootstrap has run.
- Ensure persisted state survives a restart of the app.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from burgerhero.api.app import create_app
from burgerhero.settings import Settings


def _sqlite(settings: Settings, path: Path) -> Settings:
    return settings.model_copy(update={"database_url": f"sqlite+aiosqlite:///{path}"})


@pytest.mark.asyncio
async def test_health_endpoints(tmp_path: Path, fake_backend, settings: Settings) -> None:
    app = create_app(settings=_sqlite(settings, tmp_path / "smoke.db"), transport=fake_backend.transport())

    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz")
            assert r.status_code == 200
            assert r.json()["status"] == "ok"

            r = await client.get("/readyz")
            assert r.status_code == 200
            assert r.json()["status"] == "ready"
            assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_sign_in_survives_restart_on_sqlite(tmp_path: Path, fake_backend, settings: Settings) -> None:
    fake_backend.add_user(
        "hero@example.com", role="client", profile={"display_name": "Ana", "hero_code": "HE777"}
    )
    settings = _sqlite(settings, tmp_path / "restart.db")

    app = create_app(settings=settings, transport=fake_backend.transport())
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.post(
                "/v1/auth/sign-in", json={"email": "hero@example.com", "password": "secret123"}
            )
            assert r.status_code == 200

    app = create_app(settings=settings, transport=fake_backend.transport())
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            body = (await client.get("/v1/auth/state")).json()
            assert body["is_authed"] is True
            assert body["loading"] is False
            assert body["user"]["display_name"] == "Ana"
            assert body["user"]["customer_code"] == "HE777"


# --- Module Notes -----------------------------------------------------------
# Endpoint-level behavior is covered in test_api.py on MemoryStorage.
