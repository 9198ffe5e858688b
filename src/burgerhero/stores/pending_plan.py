"""
burgerhero.stores.pending_plan

The plan a visitor picked before signing in; consumed by the checkout
redirect after authentication.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from burgerhero.storage import PENDING_PLAN_KEY, PersistentStorage


@dataclass(frozen=True, slots=True)
class PendingPlan:
    id: str
    name: str
    price_cents: int


class PendingPlanStore:
    def __init__(self, storage: PersistentStorage) -> None:
        self._storage = storage
        self.plan: PendingPlan | None = None

    async def hydrate(self) -> None:
        data = await self._storage.read(PENDING_PLAN_KEY)
        if data:
            self.plan = PendingPlan(
                id=str(data["id"]),
                name=str(data.get("name") or ""),
                price_cents=int(data.get("price_cents") or 0),
            )

    async def set(self, plan: PendingPlan) -> None:
        self.plan = plan
        await self._storage.write(PENDING_PLAN_KEY, asdict(plan))

    async def clear(self) -> None:
        self.plan = None
        await self._storage.remove(PENDING_PLAN_KEY)
