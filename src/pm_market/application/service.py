"""MarketApplicationService — market lifecycle and fee treasury entry points.

Mutations (initialize, resolve, withdraw_fees) follow one shape:
  validate input -> per-market lock -> read FOR UPDATE -> domain transition ->
  persist + escrow + event record -> verify invariants -> commit.
Any exception rolls the whole transaction back. Events are broadcast only after
commit. Reads (get_market, list_markets) run without an explicit transaction.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.custody import EscrowProtocol
from src.pm_clearing.domain.fee import withdraw_fees
from src.pm_clearing.domain.invariants import verify_market_invariants
from src.pm_clearing.infrastructure.escrow import EscrowLedger
from src.pm_common.datetime_utils import Clock, SystemClock
from src.pm_common.enums import EscrowEntryType, Outcome
from src.pm_common.errors import MarketNotFoundError
from src.pm_common.locks import market_locks
from src.pm_common.units import validate_amount
from src.pm_events.domain.publisher import EventPublisherProtocol
from src.pm_events.infrastructure.publisher import MarketEventPublisher
from src.pm_market.application.schemas import (
    FeeWithdrawalResponse,
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain import lifecycle
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        escrow: EscrowProtocol | None = None,
        events: EventPublisherProtocol | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._escrow: EscrowProtocol = escrow or EscrowLedger()
        self._events: EventPublisherProtocol = events or MarketEventPublisher()
        self._clock: Clock = clock or SystemClock()

    async def _load_for_update(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_for_update(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def initialize_market(
        self,
        db: AsyncSession,
        creator: str,
        market_id: str,
        question: str,
        resolution_time: datetime,
        initial_liquidity: int,
    ) -> MarketDetail:
        now = self._clock.now()
        market, event = lifecycle.initialize_market(
            market_id, question, creator, resolution_time, initial_liquidity, now
        )
        async with market_locks.lock_for(market_id):
            try:
                await self._repo.insert_market(db, market)
                await self._escrow.open_vault(db, market_id)
                if initial_liquidity > 0:
                    # Seed is real collateral posted by the creator
                    vault = await self._escrow.lock_collateral(
                        db, market_id, creator, initial_liquidity, EscrowEntryType.SEED_IN
                    )
                else:
                    vault = await self._escrow.get_vault_balance(db, market_id)
                verify_market_invariants(market, vault)
                event_id = await self._events.record(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Market created: market=%s creator=%s seed=%d resolution_time=%s",
            market_id, creator, initial_liquidity, resolution_time.isoformat(),
        )
        await self._events.broadcast(event, event_id)
        return MarketDetail.from_domain(market)

    async def resolve_market(
        self, db: AsyncSession, caller: str, market_id: str, outcome: Outcome
    ) -> MarketDetail:
        async with market_locks.lock_for(market_id):
            try:
                now = self._clock.now()
                market = await self._load_for_update(db, market_id)
                event = lifecycle.resolve_market(market, caller, outcome, now)
                await self._repo.update_resolution(db, market)
                verify_market_invariants(market)
                event_id = await self._events.record(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Market resolved: market=%s outcome=%s yes_pool=%d no_pool=%d",
            market_id, outcome.value, market.yes_pool, market.no_pool,
        )
        await self._events.broadcast(event, event_id)
        return MarketDetail.from_domain(market)

    async def withdraw_fees(
        self, db: AsyncSession, caller: str, market_id: str, amount: int
    ) -> FeeWithdrawalResponse:
        """Creator-only. amount must be positive; zero is an InvalidAmountError, not a no-op."""
        validate_amount(amount)
        async with market_locks.lock_for(market_id):
            try:
                now = self._clock.now()
                market = await self._load_for_update(db, market_id)
                event = withdraw_fees(market, caller, amount, now)
                await self._repo.update_balances(db, market)
                vault = await self._escrow.release_collateral(
                    db, market_id, caller, amount, EscrowEntryType.FEE_OUT
                )
                verify_market_invariants(market, vault)
                event_id = await self._events.record(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Fees withdrawn: market=%s creator=%s amount=%d remaining=%d",
            market_id, caller, amount, market.fee_collected,
        )
        await self._events.broadcast(event, event_id)
        return FeeWithdrawalResponse(
            market_id=market_id, withdrawn=amount, fee_collected=market.fee_collected
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market)

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        # status=None -> OPEN; status='ALL' -> no filter
        sql_status = None if status == "ALL" else (status or "OPEN")
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._repo.list_markets(db, sql_status, cursor_ts, cursor_id, limit + 1)
        has_more = len(markets) > limit
        page = markets[:limit]

        items = [MarketListItem.from_domain(m) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)
