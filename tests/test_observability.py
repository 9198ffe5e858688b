from __future__ import annotations

import httpx
import pytest

from burgerhero.api.app import create_app
from burgerhero.observability.logging import REDACTED, redact_sensitive
from burgerhero.storage import MemoryStorage


def test_redact_sensitive_masks_credentials_and_cpf() -> None:
    event = redact_sensitive(
        None,
        "info",
        {"event": "x", "password": "hunter2", "cpf": "52998224725", "refresh_token": "", "user_id": "u1"},
    )

    assert event["password"] == REDACTED
    assert event["cpf"] == REDACTED
    # Empty values carry nothing worth hiding.
    assert event["refresh_token"] == ""
    assert event["user_id"] == "u1"


@pytest.mark.asyncio
async def test_request_id_is_propagated(settings, fake_backend) -> None:
    app = create_app(settings=settings, storage=MemoryStorage(), transport=fake_backend.transport())

    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz", headers={"x-request-id": "req-123"})
            generated = await client.get("/healthz")

    assert r.headers["x-request-id"] == "req-123"
    assert generated.headers["x-request-id"]
