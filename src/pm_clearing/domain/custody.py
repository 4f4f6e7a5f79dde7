"""Escrow Protocol — the custody collaborator as seen by the core.

Implementations must run on the caller's AsyncSession so that collateral movement
commits or rolls back together with the market/position update.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import EscrowEntryType


class EscrowProtocol(Protocol):
    async def open_vault(self, db: AsyncSession, market_id: str) -> None: ...

    async def lock_collateral(
        self,
        db: AsyncSession,
        market_id: str,
        account_id: str,
        amount: int,
        entry_type: EscrowEntryType,
    ) -> int: ...

    async def release_collateral(
        self,
        db: AsyncSession,
        market_id: str,
        account_id: str,
        amount: int,
        entry_type: EscrowEntryType,
    ) -> int: ...

    async def get_vault_balance(self, db: AsyncSession, market_id: str) -> int: ...
