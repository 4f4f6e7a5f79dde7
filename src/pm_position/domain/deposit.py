"""Deposit handling — place_prediction against one side's bonding curve.

Only the chosen side's pool grows; the opposing pool is untouched. The fee (if any
policy is wired in) is carved out of the gross amount before pricing and credited
to fee_collected, so the escrowed amount always equals pool growth + fee.
"""

from dataclasses import dataclass
from datetime import datetime

from src.pm_clearing.domain.fee import FeePolicy, checked_fee
from src.pm_common.enums import Outcome
from src.pm_common.errors import InsufficientOutputError
from src.pm_common.units import saturating_add, validate_amount
from src.pm_events.domain.events import PredictionPlaced
from src.pm_market.domain.lifecycle import ensure_accepting_predictions
from src.pm_market.domain.models import Market
from src.pm_market.domain.pricing import tokens_out
from src.pm_position.domain.models import Position


@dataclass(frozen=True)
class PredictionQuote:
    side: Outcome
    amount: int
    fee: int
    net_amount: int
    tokens_out: int
    pool_before: int
    pool_after: int


def quote_prediction(
    market: Market, side: Outcome, amount: int, fee_policy: FeePolicy
) -> PredictionQuote:
    """Price a deposit without touching the market."""
    validate_amount(amount)
    fee = checked_fee(fee_policy, amount)
    net = amount - fee
    pool = market.pool_for(side)
    tokens = tokens_out(pool, net) if net > 0 else 0
    return PredictionQuote(
        side=side,
        amount=amount,
        fee=fee,
        net_amount=net,
        tokens_out=tokens,
        pool_before=pool,
        pool_after=saturating_add(pool, net),
    )


def place_prediction(
    market: Market,
    predictor: str,
    side: Outcome,
    amount: int,
    now: datetime,
    fee_policy: FeePolicy,
) -> tuple[Position, PredictionQuote, PredictionPlaced]:
    validate_amount(amount)
    ensure_accepting_predictions(market, now)

    quote = quote_prediction(market, side, amount, fee_policy)
    if quote.tokens_out == 0:
        raise InsufficientOutputError(quote.net_amount, quote.pool_before)

    market.set_pool(side, quote.pool_after)
    market.fee_collected = saturating_add(market.fee_collected, quote.fee)
    market.updated_at = now

    position = Position(
        market_id=market.id,
        predictor=predictor,
        prediction_type=side,
        amount_deposited=amount,
        tokens_received=quote.tokens_out,
        created_at=now,
        fee_paid=quote.fee,
    )
    event = PredictionPlaced(
        market_id=market.id,
        actor=predictor,
        occurred_at=now,
        side=side,
        amount=amount,
        fee=quote.fee,
        tokens_received=quote.tokens_out,
        yes_pool=market.yes_pool,
        no_pool=market.no_pool,
    )
    return position, quote, event
