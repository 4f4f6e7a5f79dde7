# src/pm_admin/application/service.py
"""Admin application service — read-only market audit."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.custody import EscrowProtocol
from src.pm_clearing.domain.invariants import check_market_invariants
from src.pm_clearing.infrastructure.escrow import EscrowLedger
from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.schemas import MarketDetail
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository


class AdminService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        escrow: EscrowProtocol | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._escrow: EscrowProtocol = escrow or EscrowLedger()

    async def audit_market(self, market_id: str, db: AsyncSession) -> dict[str, Any]:
        """Snapshot of a market, its escrow balance and any conservation violations.

        The report is informational: violations are returned, not raised.
        """
        market = await self._markets.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)

        vault_balance = await self._escrow.get_vault_balance(db, market_id)
        violations = check_market_invariants(market, vault_balance)
        summary = await self._positions.summarize_market(db, market_id)
        return {
            "market": MarketDetail.from_domain(market).model_dump(),
            "vault_balance": vault_balance,
            "expected_vault_balance": (
                market.reservoir + market.fee_collected - market.total_paid_out
            ),
            "positions": summary,
            "violations": violations,
            "consistent": not violations,
        }
