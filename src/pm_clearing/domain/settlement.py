"""SettlementEngine — pay a winning Position its share of the reservoir.

    W = winning side's pool at resolution, T = yes_pool + no_pool
    reward = floor(tokens_received * T / W)      (0 when W == 0)

Each winning token is worth T / W, so if every winner claims, the total paid is T
minus floor-rounding dust. total_paid_out is capped at T regardless.
"""

import logging
from datetime import datetime

from src.pm_common.errors import (
    AlreadyClaimedError,
    MarketNotResolvedError,
    NoRewardError,
    PredictionLostError,
    ReservoirExhaustedError,
    UnauthorizedError,
)
from src.pm_common.units import mul_div_floor, saturating_add, saturating_sub
from src.pm_events.domain.events import RewardClaimed
from src.pm_market.domain.models import Market
from src.pm_position.domain.models import Position

logger = logging.getLogger(__name__)


def compute_reward(tokens_received: int, winning_pool: int, reservoir: int) -> int:
    if winning_pool == 0:
        return 0
    return mul_div_floor(tokens_received, reservoir, winning_pool)


def claim_reward(
    market: Market, position: Position, claimer: str, now: datetime
) -> tuple[int, RewardClaimed]:
    """Validate, price and mark the claim. Returns (reward, event).

    The position is flagged claimed in the same step that fixes the reward, so a
    second attempt against the same record fails with AlreadyClaimed.
    """
    if not market.resolved:
        raise MarketNotResolvedError(market.id)
    if position.predictor != claimer or position.market_id != market.id:
        raise UnauthorizedError(f"Position does not belong to caller in market {market.id}")
    if position.claimed:
        raise AlreadyClaimedError(market.id, claimer)

    outcome = market.require_outcome()
    if position.prediction_type is not outcome:
        raise PredictionLostError(market.id)

    reservoir = market.reservoir
    reward = compute_reward(position.tokens_received, market.pool_for(outcome), reservoir)
    if reward == 0:
        raise NoRewardError(market.id)

    remaining = saturating_sub(reservoir, market.total_paid_out)
    if reward > remaining:
        raise ReservoirExhaustedError(reward, remaining)

    position.claimed = True
    position.claimed_at = now
    position.reward_paid = reward
    market.total_paid_out = saturating_add(market.total_paid_out, reward)
    market.updated_at = now

    logger.debug(
        "Reward computed: market=%s claimer=%s tokens=%d reward=%d paid=%d/%d",
        market.id, claimer, position.tokens_received, reward,
        market.total_paid_out, reservoir,
    )
    return reward, RewardClaimed(
        market_id=market.id,
        actor=claimer,
        occurred_at=now,
        reward=reward,
    )
