"""Fee policy hook and fee treasury.

No accrual rate is built in: NoFeePolicy is the default. BasisPointsFeePolicy is the
pluggable alternative, selected by MARKET_FEE_BPS.
"""

from datetime import datetime
from typing import Protocol

from src.pm_common.errors import InsufficientFeesError
from src.pm_common.units import ceil_div, validate_amount
from src.pm_events.domain.events import FeesWithdrawn
from src.pm_market.domain.lifecycle import ensure_creator
from src.pm_market.domain.models import Market

BPS_DENOMINATOR = 10_000


class FeePolicy(Protocol):
    def fee_for(self, amount: int) -> int: ...


class NoFeePolicy:
    def fee_for(self, amount: int) -> int:
        return 0


class BasisPointsFeePolicy:
    def __init__(self, fee_bps: int) -> None:
        if not (0 <= fee_bps <= BPS_DENOMINATOR):
            raise ValueError(f"fee_bps must be 0-{BPS_DENOMINATOR}, got {fee_bps}")
        self.fee_bps = fee_bps

    def fee_for(self, amount: int) -> int:
        """Ceiling division: ceil(amount * bps / 10000); the treasury never under-collects."""
        if amount == 0 or self.fee_bps == 0:
            return 0
        return ceil_div(amount * self.fee_bps, BPS_DENOMINATOR)


def fee_policy_from_bps(fee_bps: int) -> FeePolicy:
    return BasisPointsFeePolicy(fee_bps) if fee_bps > 0 else NoFeePolicy()


def checked_fee(policy: FeePolicy, amount: int) -> int:
    fee = policy.fee_for(amount)
    if not (0 <= fee <= amount):
        raise ValueError(f"Fee policy returned {fee} for amount {amount}")
    return fee


def withdraw_fees(
    market: Market, caller: str, amount: int, now: datetime
) -> FeesWithdrawn:
    """Decrement fee_collected; the caller moves `amount` out of escrow.

    A zero withdrawal is refused with InvalidAmountError rather than accepted as a
    no-op: every FEE_OUT ledger entry moves a strictly positive amount.
    """
    validate_amount(amount)
    ensure_creator(market, caller)
    if amount > market.fee_collected:
        raise InsufficientFeesError(amount, market.fee_collected)

    market.fee_collected -= amount
    market.updated_at = now
    return FeesWithdrawn(
        market_id=market.id,
        actor=caller,
        occurred_at=now,
        amount=amount,
        fee_collected=market.fee_collected,
    )
