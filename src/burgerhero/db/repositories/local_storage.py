"""
burgerhero.db.repositories.local_storage

Repository for `LocalStorageEntry` rows.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, text
from sqlalchemy.ext.asyncio import AsyncSession

from burgerhero.db.models import LocalStorageEntry


class LocalStorageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: str) -> dict[str, Any] | None:
        entry = await self._session.get(LocalStorageEntry, key)
        return dict(entry.value) if entry is not None else None

    async def put(self, key: str, value: dict[str, Any]) -> None:
        entry = await self._session.get(LocalStorageEntry, key)
        if entry is None:
            self._session.add(LocalStorageEntry(key=key, value=value))
        else:
            # Reassign so the JSON column is marked dirty.
            entry.value = dict(value)
        await self._session.flush()

    async def delete(self, key: str) -> None:
        await self._session.execute(delete(LocalStorageEntry).where(LocalStorageEntry.key == key))

    async def ping(self) -> None:
        await self._session.execute(text("SELECT 1"))
