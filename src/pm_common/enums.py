"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Outcome(str, Enum):
    """Binary side of a market. Wire/boolean form: True = YES, False = NO."""

    YES = "YES"
    NO = "NO"

    @classmethod
    def from_bool(cls, value: bool) -> "Outcome":
        return cls.YES if value else cls.NO

    def as_bool(self) -> bool:
        return self is Outcome.YES


class MarketStatus(str, Enum):
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


class MarketEventType(str, Enum):
    MARKET_CREATED = "MarketCreated"
    PREDICTION_PLACED = "PredictionPlaced"
    MARKET_RESOLVED = "MarketResolved"
    REWARD_CLAIMED = "RewardClaimed"
    FEES_WITHDRAWN = "FeesWithdrawn"


class EscrowEntryType(str, Enum):
    SEED_IN = "SEED_IN"
    DEPOSIT_IN = "DEPOSIT_IN"
    REWARD_OUT = "REWARD_OUT"
    FEE_OUT = "FEE_OUT"
