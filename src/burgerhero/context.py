"""
burgerhero.context

Composition root for the process-wide client state.

Responsibilities:
- Build storage, backend clients, stores, and services in dependency order.
- Load persisted state once (`start`) and run the session bootstrap.
- Release the HTTP client and DB engine on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from burgerhero.backend.identity import IdentityClient
from burgerhero.backend.profiles import ProfileClient
from burgerhero.db.init_db import init_db
from burgerhero.db.session import create_engine, create_sessionmaker
from burgerhero.observability.logging import get_logger
from burgerhero.services.preferences import PreferencesService
from burgerhero.services.session_bootstrapper import BootstrapOutcome, SessionBootstrapper
from burgerhero.settings import Settings
from burgerhero.storage import PersistentStorage, SqlStorage
from burgerhero.stores.auth_store import AuthStore
from burgerhero.stores.card_store import CardStore
from burgerhero.stores.pending_plan import PendingPlanStore
from burgerhero.stores.theme_store import ThemeStore

log = get_logger(__name__)


@dataclass(slots=True)
class AppContext:
    settings: Settings
    storage: PersistentStorage
    http: httpx.AsyncClient
    identity: IdentityClient
    profiles: ProfileClient
    auth: AuthStore
    theme: ThemeStore
    card: CardStore
    pending_plan: PendingPlanStore
    preferences: PreferencesService
    bootstrapper: SessionBootstrapper
    engine: AsyncEngine | None = None

    async def start(self) -> BootstrapOutcome:
        # Persisted state is read exactly once, before anything can mutate it.
        await self.identity.restore()
        await self.auth.hydrate()
        await self.theme.hydrate()
        await self.card.hydrate()
        await self.pending_plan.hydrate()
        self.theme.apply_theme()

        outcome = await self.bootstrapper.initialize()
        log.info("context_started", outcome=outcome.value)
        return outcome

    async def close(self) -> None:
        self.bootstrapper.detach()
        await self.http.aclose()
        if self.engine is not None:
            await self.engine.dispose()


async def build_context(
    settings: Settings,
    *,
    storage: PersistentStorage | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppContext:
    engine: AsyncEngine | None = None
    if storage is None:
        engine = create_engine(settings)
        if settings.env in ("dev", "test"):
            await init_db(engine)
        storage = SqlStorage(create_sessionmaker(engine))

    http = httpx.AsyncClient(transport=transport, timeout=settings.backend_timeout_seconds)
    identity = IdentityClient(settings=settings, http=http, storage=storage)
    profiles = ProfileClient(settings=settings, http=http, identity=identity)

    auth = AuthStore(storage, profiles)
    theme = ThemeStore(storage, system_prefers_dark=settings.system_prefers_dark)
    card = CardStore(storage)
    pending_plan = PendingPlanStore(storage)
    preferences = PreferencesService(theme=theme, card=card, auth=auth, profiles=profiles)
    bootstrapper = SessionBootstrapper(
        identity=identity, profiles=profiles, auth=auth, preferences=preferences
    )

    return AppContext(
        settings=settings,
        storage=storage,
        http=http,
        identity=identity,
        profiles=profiles,
        auth=auth,
        theme=theme,
        card=card,
        pending_plan=pending_plan,
        preferences=preferences,
        bootstrapper=bootstrapper,
        engine=engine,
    )


# --- Module Notes -----------------------------------------------------------
# Replaces module-level store singletons: the API reads this object from app.state, and
# tests build one per case with MemoryStorage and an httpx.MockTransport.
