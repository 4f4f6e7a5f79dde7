"""Pydantic schemas for pm_position requests and responses."""

from typing import Literal

from pydantic import BaseModel

from src.pm_position.domain.deposit import PredictionQuote
from src.pm_position.domain.models import Position


class PlacePredictionRequest(BaseModel):
    side: Literal["YES", "NO"]
    amount: int


class QuoteResponse(BaseModel):
    market_id: str
    side: str
    amount: int
    fee: int
    net_amount: int
    tokens_out: int
    pool_before: int
    pool_after: int

    @classmethod
    def from_domain(cls, market_id: str, q: PredictionQuote) -> "QuoteResponse":
        return cls(
            market_id=market_id,
            side=q.side.value,
            amount=q.amount,
            fee=q.fee,
            net_amount=q.net_amount,
            tokens_out=q.tokens_out,
            pool_before=q.pool_before,
            pool_after=q.pool_after,
        )


class PositionResponse(BaseModel):
    market_id: str
    predictor: str
    prediction_type: str
    amount_deposited: int
    tokens_received: int
    fee_paid: int
    claimed: bool
    claimed_at: str | None
    reward_paid: int
    created_at: str

    @classmethod
    def from_domain(cls, p: Position) -> "PositionResponse":
        return cls(
            market_id=p.market_id,
            predictor=p.predictor,
            prediction_type=p.prediction_type.value,
            amount_deposited=p.amount_deposited,
            tokens_received=p.tokens_received,
            fee_paid=p.fee_paid,
            claimed=p.claimed,
            claimed_at=p.claimed_at.isoformat() if p.claimed_at else None,
            reward_paid=p.reward_paid,
            created_at=p.created_at.isoformat(),
        )


class PlacePredictionResponse(BaseModel):
    position: PositionResponse
    yes_pool: int
    no_pool: int
    fee_collected: int


class ClaimRewardResponse(BaseModel):
    market_id: str
    predictor: str
    reward: int
    total_paid_out: int
