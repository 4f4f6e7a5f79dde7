"""Domain models for pm_position — plain dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import Outcome


@dataclass
class Position:
    """One participant's single deposit in one market, keyed by (market_id, predictor)."""

    market_id: str
    predictor: str
    prediction_type: Outcome        # immutable side
    amount_deposited: int           # gross collateral paid in
    tokens_received: int            # AMM output at deposit time
    created_at: datetime
    fee_paid: int = 0
    claimed: bool = False           # false -> true exactly once
    claimed_at: datetime | None = None
    reward_paid: int = 0
