"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_position.domain.models import Position


class PositionRepositoryProtocol(Protocol):
    async def get_position(
        self, db: AsyncSession, market_id: str, predictor: str
    ) -> Position | None: ...

    async def get_position_for_update(
        self, db: AsyncSession, market_id: str, predictor: str
    ) -> Position | None: ...

    async def insert_position(self, db: AsyncSession, position: Position) -> None: ...

    async def mark_claimed(self, db: AsyncSession, position: Position) -> None: ...

    async def summarize_market(self, db: AsyncSession, market_id: str) -> dict[str, Any]: ...
