"""Market notifications — observational only, never read back into core state.

Each successful operation emits exactly one event carrying its output fields
plus the acting identity.
"""

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from src.pm_common.enums import MarketEventType, Outcome


@dataclass(frozen=True)
class MarketEvent:
    event_type: ClassVar[MarketEventType]

    market_id: str
    actor: str
    occurred_at: datetime

    def payload(self) -> dict[str, Any]:
        """JSON-safe dict of the event-specific fields (excludes the envelope)."""
        envelope = {f.name for f in fields(MarketEvent)}
        out: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if key in envelope:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Enum):
                value = value.value
            out[key] = value
        return out

    def to_message(self, event_id: str) -> dict[str, Any]:
        return {
            "event_id": event_id,
            "event_type": self.event_type.value,
            "market_id": self.market_id,
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": self.payload(),
        }


@dataclass(frozen=True)
class MarketCreated(MarketEvent):
    event_type: ClassVar[MarketEventType] = MarketEventType.MARKET_CREATED

    question: str
    resolution_time: datetime
    initial_liquidity: int
    yes_pool: int
    no_pool: int


@dataclass(frozen=True)
class PredictionPlaced(MarketEvent):
    event_type: ClassVar[MarketEventType] = MarketEventType.PREDICTION_PLACED

    side: Outcome
    amount: int
    fee: int
    tokens_received: int
    yes_pool: int
    no_pool: int


@dataclass(frozen=True)
class MarketResolved(MarketEvent):
    event_type: ClassVar[MarketEventType] = MarketEventType.MARKET_RESOLVED

    outcome: Outcome
    yes_pool: int
    no_pool: int


@dataclass(frozen=True)
class RewardClaimed(MarketEvent):
    event_type: ClassVar[MarketEventType] = MarketEventType.REWARD_CLAIMED

    reward: int


@dataclass(frozen=True)
class FeesWithdrawn(MarketEvent):
    event_type: ClassVar[MarketEventType] = MarketEventType.FEES_WITHDRAWN

    amount: int
    fee_collected: int
