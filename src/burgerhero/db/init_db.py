"""
burgerhero.db.init_db

DB initialization helpers (dev/test convenience).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from burgerhero.db import models  # noqa: F401  # registers tables on Base.metadata
from burgerhero.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create the storage table if it does not exist.
    Production deployments run `alembic upgrade head` instead.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
