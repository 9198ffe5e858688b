"""
burgerhero.storage

Local persistent key-value storage port.

Responsibilities:
- Define the async interface stores use to load their state once at startup
  and write it back on every mutation.
- Provide the SQLAlchemy-backed implementation used by the service and an
  in-memory one for tests and throwaway runs.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from burgerhero.db.repositories.local_storage import LocalStorageRepo

AUTH_KEY = "burger-hero-auth"
THEME_KEY = "burger-hero-theme"
CARD_PREFS_KEY = "burger-hero-card-prefs-v6"
PENDING_PLAN_KEY = "burger-hero-pending-plan"
SESSION_KEY = "burger-hero-session"


class PersistentStorage(Protocol):
    async def read(self, key: str) -> dict[str, Any] | None: ...

    async def write(self, key: str, value: dict[str, Any]) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def ping(self) -> None: ...


class SqlStorage:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def read(self, key: str) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            return await LocalStorageRepo(session).get(key)

    async def write(self, key: str, value: dict[str, Any]) -> None:
        async with self._session_factory() as session:
            await LocalStorageRepo(session).put(key, value)
            await session.commit()

    async def remove(self, key: str) -> None:
        async with self._session_factory() as session:
            await LocalStorageRepo(session).delete(key)
            await session.commit()

    async def ping(self) -> None:
        async with self._session_factory() as session:
            await LocalStorageRepo(session).ping()


class MemoryStorage:
    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self.data: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})

    async def read(self, key: str) -> dict[str, Any] | None:
        value = self.data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def write(self, key: str, value: dict[str, Any]) -> None:
        self.data[key] = copy.deepcopy(value)

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)

    async def ping(self) -> None:
        return None


# --- Module Notes -----------------------------------------------------------
# Values are deep-copied in MemoryStorage so tests observe exactly what a store
# persisted, not a live reference to its internal state.
