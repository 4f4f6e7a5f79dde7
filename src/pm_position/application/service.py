"""PredictionApplicationService — deposits, claims and position reads.

place_prediction and claim_reward mutate a market and one of its positions, so
both run under the market's lock with the market row held FOR UPDATE. The escrow
movement, the market/position rows and the event row commit together.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_clearing.domain.custody import EscrowProtocol
from src.pm_clearing.domain.fee import FeePolicy, fee_policy_from_bps
from src.pm_clearing.domain.invariants import verify_market_invariants
from src.pm_clearing.domain.settlement import claim_reward
from src.pm_clearing.infrastructure.escrow import EscrowLedger
from src.pm_common.datetime_utils import Clock, SystemClock
from src.pm_common.enums import EscrowEntryType, Outcome
from src.pm_common.errors import (
    MarketNotFoundError,
    MarketNotResolvedError,
    PositionExistsError,
    PositionNotFoundError,
)
from src.pm_common.locks import market_locks
from src.pm_common.units import validate_amount
from src.pm_events.domain.publisher import EventPublisherProtocol
from src.pm_events.infrastructure.publisher import MarketEventPublisher
from src.pm_market.domain import lifecycle
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_position.application.schemas import (
    ClaimRewardResponse,
    PlacePredictionResponse,
    PositionResponse,
    QuoteResponse,
)
from src.pm_position.domain import deposit
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository

logger = logging.getLogger(__name__)


class PredictionApplicationService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        escrow: EscrowProtocol | None = None,
        events: EventPublisherProtocol | None = None,
        clock: Clock | None = None,
        fee_policy: FeePolicy | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._escrow: EscrowProtocol = escrow or EscrowLedger()
        self._events: EventPublisherProtocol = events or MarketEventPublisher()
        self._clock: Clock = clock or SystemClock()
        self._fee_policy: FeePolicy = fee_policy or fee_policy_from_bps(settings.MARKET_FEE_BPS)

    async def _get_market(self, db: AsyncSession, market_id: str, for_update: bool) -> Market:
        if for_update:
            market = await self._markets.get_market_for_update(db, market_id)
        else:
            market = await self._markets.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def place_prediction(
        self,
        db: AsyncSession,
        predictor: str,
        market_id: str,
        side: Outcome,
        amount: int,
    ) -> PlacePredictionResponse:
        validate_amount(amount)
        async with market_locks.lock_for(market_id):
            try:
                now = self._clock.now()
                market = await self._get_market(db, market_id, for_update=True)
                # State errors outrank the one-position-per-predictor conflict
                lifecycle.ensure_accepting_predictions(market, now)
                existing = await self._positions.get_position(db, market_id, predictor)
                if existing is not None:
                    raise PositionExistsError(market_id, predictor)

                position, quote, event = deposit.place_prediction(
                    market, predictor, side, amount, now, self._fee_policy
                )
                # Gross amount enters escrow: net to the pool, fee to the treasury
                vault = await self._escrow.lock_collateral(
                    db, market_id, predictor, amount, EscrowEntryType.DEPOSIT_IN
                )
                await self._markets.update_balances(db, market)
                await self._positions.insert_position(db, position)
                verify_market_invariants(market, vault)
                event_id = await self._events.record(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Prediction placed: market=%s predictor=%s side=%s amount=%d fee=%d tokens=%d",
            market_id, predictor, side.value, amount, quote.fee, quote.tokens_out,
        )
        await self._events.broadcast(event, event_id)
        return PlacePredictionResponse(
            position=PositionResponse.from_domain(position),
            yes_pool=market.yes_pool,
            no_pool=market.no_pool,
            fee_collected=market.fee_collected,
        )

    async def claim_reward(
        self, db: AsyncSession, claimer: str, market_id: str
    ) -> ClaimRewardResponse:
        async with market_locks.lock_for(market_id):
            try:
                now = self._clock.now()
                market = await self._get_market(db, market_id, for_update=True)
                if not market.resolved:
                    raise MarketNotResolvedError(market_id)
                position = await self._positions.get_position_for_update(db, market_id, claimer)
                if position is None:
                    raise PositionNotFoundError(market_id, claimer)

                reward, event = claim_reward(market, position, claimer, now)
                await self._positions.mark_claimed(db, position)
                await self._markets.update_balances(db, market)
                vault = await self._escrow.release_collateral(
                    db, market_id, claimer, reward, EscrowEntryType.REWARD_OUT
                )
                verify_market_invariants(market, vault)
                event_id = await self._events.record(db, event)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Reward claimed: market=%s claimer=%s reward=%d paid=%d/%d",
            market_id, claimer, reward, market.total_paid_out, market.reservoir,
        )
        await self._events.broadcast(event, event_id)
        return ClaimRewardResponse(
            market_id=market_id,
            predictor=claimer,
            reward=reward,
            total_paid_out=market.total_paid_out,
        )

    async def get_position(
        self, db: AsyncSession, market_id: str, predictor: str
    ) -> PositionResponse:
        position = await self._positions.get_position(db, market_id, predictor)
        if position is None:
            raise PositionNotFoundError(market_id, predictor)
        return PositionResponse.from_domain(position)

    async def quote(
        self, db: AsyncSession, market_id: str, side: Outcome, amount: int
    ) -> QuoteResponse:
        """Price a deposit against the current pools without placing it."""
        market = await self._get_market(db, market_id, for_update=False)
        q = deposit.quote_prediction(market, side, amount, self._fee_policy)
        return QuoteResponse.from_domain(market_id, q)
