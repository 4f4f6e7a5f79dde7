# src/pm_events/domain/publisher.py
"""Publisher Protocol — dependency inversion for testability.

record() runs inside the caller's transaction; broadcast() runs after commit.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_events.domain.events import MarketEvent


class EventPublisherProtocol(Protocol):
    async def record(self, db: AsyncSession, event: MarketEvent) -> str: ...

    async def broadcast(self, event: MarketEvent, event_id: str) -> None: ...
