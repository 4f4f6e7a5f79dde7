"""Market lifecycle state machine: Open -> Resolved (terminal).

    Open      resolved = False; accepts deposits while now < resolution_time
    (frozen)  still Open but now >= resolution_time; deposits rejected, awaiting resolve
    Resolved  outcome fixed once by the creator; nothing transitions out

Guards raise typed AppErrors and never mutate; transitions mutate only after every
guard has passed.
"""

import logging
from datetime import datetime

from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InvalidAmountError,
    InvalidQuestionError,
    InvalidResolutionTimeError,
    MarketAlreadyResolvedError,
    MarketExpiredError,
    MarketNotExpiredError,
    UnauthorizedError,
)
from src.pm_common.units import U64_MAX
from src.pm_events.domain.events import MarketCreated, MarketResolved
from src.pm_market.domain.models import UNRESOLVED, Market, Resolved

logger = logging.getLogger(__name__)

QUESTION_MAX_LENGTH = 256


# ---------------------------------------------------------------------------
# Input validation (no state read)
# ---------------------------------------------------------------------------

def validate_question(question: str) -> None:
    if not (1 <= len(question) <= QUESTION_MAX_LENGTH):
        raise InvalidQuestionError(len(question))


def validate_resolution_time(resolution_time: datetime, now: datetime) -> None:
    if resolution_time <= now:
        raise InvalidResolutionTimeError()


def validate_liquidity(initial_liquidity: int) -> None:
    if not (0 <= initial_liquidity <= U64_MAX):
        raise InvalidAmountError(initial_liquidity)


def split_seed_liquidity(initial_liquidity: int) -> tuple[int, int]:
    """(yes_pool, no_pool); the odd unit of an odd seed goes to YES."""
    no_pool = initial_liquidity // 2
    return initial_liquidity - no_pool, no_pool


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

def ensure_creator(market: Market, caller: str) -> None:
    if caller != market.creator:
        raise UnauthorizedError(f"Only the market creator may do this: {market.id}")


def ensure_accepting_predictions(market: Market, now: datetime) -> None:
    if market.resolved:
        raise MarketAlreadyResolvedError(market.id)
    if now >= market.resolution_time:
        raise MarketExpiredError(market.id)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def initialize_market(
    market_id: str,
    question: str,
    creator: str,
    resolution_time: datetime,
    initial_liquidity: int,
    now: datetime,
) -> tuple[Market, MarketCreated]:
    validate_question(question)
    validate_resolution_time(resolution_time, now)
    validate_liquidity(initial_liquidity)

    yes_pool, no_pool = split_seed_liquidity(initial_liquidity)
    market = Market(
        id=market_id,
        question=question,
        creator=creator,
        created_at=now,
        resolution_time=resolution_time,
        yes_pool=yes_pool,
        no_pool=no_pool,
        total_liquidity=initial_liquidity,
        fee_collected=0,
        total_paid_out=0,
        resolution=UNRESOLVED,
        updated_at=now,
    )
    event = MarketCreated(
        market_id=market_id,
        actor=creator,
        occurred_at=now,
        question=question,
        resolution_time=resolution_time,
        initial_liquidity=initial_liquidity,
        yes_pool=yes_pool,
        no_pool=no_pool,
    )
    return market, event


def resolve_market(
    market: Market, caller: str, outcome: Outcome, now: datetime
) -> MarketResolved:
    """Fix the outcome exactly once. Pools are left untouched as the reservoir."""
    ensure_creator(market, caller)
    if market.resolved:
        raise MarketAlreadyResolvedError(market.id)
    if now < market.resolution_time:
        raise MarketNotExpiredError(market.id)

    market.resolution = Resolved(outcome=outcome, resolved_at=now)
    market.updated_at = now
    logger.debug(
        "Market resolved in domain: market=%s outcome=%s reservoir=%d",
        market.id, outcome.value, market.reservoir,
    )
    return MarketResolved(
        market_id=market.id,
        actor=caller,
        occurred_at=now,
        outcome=outcome,
        yes_pool=market.yes_pool,
        no_pool=market.no_pool,
    )
