"""Domain models for pm_market — plain dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.pm_common.enums import MarketStatus, Outcome
from src.pm_common.errors import InvalidOutcomeError
from src.pm_common.units import saturating_add


@dataclass(frozen=True)
class Unresolved:
    """Outcome not yet fixed; reading it is an error."""


@dataclass(frozen=True)
class Resolved:
    outcome: Outcome
    resolved_at: datetime


Resolution = Unresolved | Resolved

UNRESOLVED = Unresolved()


@dataclass
class Market:
    id: str
    question: str
    creator: str
    created_at: datetime
    resolution_time: datetime
    yes_pool: int
    no_pool: int
    total_liquidity: int            # informational seed amount
    fee_collected: int = 0          # withdrawable by creator
    total_paid_out: int = 0         # sum of all rewards paid so far
    resolution: Resolution = field(default=UNRESOLVED)
    updated_at: datetime | None = None

    @property
    def resolved(self) -> bool:
        return isinstance(self.resolution, Resolved)

    @property
    def status(self) -> MarketStatus:
        return MarketStatus.RESOLVED if self.resolved else MarketStatus.OPEN

    @property
    def outcome(self) -> Outcome | None:
        if isinstance(self.resolution, Resolved):
            return self.resolution.outcome
        return None

    @property
    def resolved_at(self) -> datetime | None:
        if isinstance(self.resolution, Resolved):
            return self.resolution.resolved_at
        return None

    @property
    def reservoir(self) -> int:
        """Combined pool total; the payout reservoir once resolved."""
        return saturating_add(self.yes_pool, self.no_pool)

    def require_outcome(self) -> Outcome:
        if not isinstance(self.resolution, Resolved):
            raise InvalidOutcomeError(self.id)
        return self.resolution.outcome

    def pool_for(self, side: Outcome) -> int:
        return self.yes_pool if side is Outcome.YES else self.no_pool

    def set_pool(self, side: Outcome, value: int) -> None:
        if side is Outcome.YES:
            self.yes_pool = value
        else:
            self.no_pool = value
