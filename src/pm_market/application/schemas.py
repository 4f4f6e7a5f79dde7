"""Pydantic schemas for pm_market requests and responses.

Question length, amounts and resolution time are validated by the domain, which
raises the typed AppErrors; they carry no Field constraints here.

Cursor format for markets (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<market_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.pm_common.datetime_utils import ensure_utc
from src.pm_market.domain.models import Market
from src.pm_market.domain.pricing import implied_yes_probability

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    """Encode composite cursor from last market in page."""
    payload = {
        "ts": last_market.created_at.isoformat(),
        "id": last_market.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, market_id); (None, None) if malformed or ts unparseable."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        ts, market_id = data["ts"], data["id"]
        datetime.fromisoformat(ts)
        if not isinstance(market_id, str):
            return None, None
        return ts, market_id
    except Exception:
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class InitializeMarketRequest(BaseModel):
    market_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9._:-]+$")
    question: str
    resolution_time: datetime
    initial_liquidity: int = 0

    @field_validator("resolution_time")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ResolveMarketRequest(BaseModel):
    outcome: Literal["YES", "NO"]


class WithdrawFeesRequest(BaseModel):
    amount: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


class MarketListItem(BaseModel):
    id: str
    question: str
    status: str
    resolution_time: str
    yes_pool: int
    no_pool: int
    implied_yes_probability: float | None
    outcome: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        return cls(
            id=m.id,
            question=m.question,
            status=m.status.value,
            resolution_time=m.resolution_time.isoformat(),
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
            implied_yes_probability=implied_yes_probability(m.yes_pool, m.no_pool),
            outcome=m.outcome.value if m.outcome else None,
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    next_cursor: str | None
    has_more: bool


class MarketDetail(BaseModel):
    id: str
    question: str
    creator: str
    status: str
    created_at: str
    resolution_time: str
    yes_pool: int
    no_pool: int
    reservoir: int
    total_liquidity: int
    fee_collected: int
    total_paid_out: int
    implied_yes_probability: float | None
    resolved: bool
    outcome: str | None
    resolved_at: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            question=m.question,
            creator=m.creator,
            status=m.status.value,
            created_at=m.created_at.isoformat(),
            resolution_time=m.resolution_time.isoformat(),
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
            reservoir=m.reservoir,
            total_liquidity=m.total_liquidity,
            fee_collected=m.fee_collected,
            total_paid_out=m.total_paid_out,
            implied_yes_probability=implied_yes_probability(m.yes_pool, m.no_pool),
            resolved=m.resolved,
            outcome=m.outcome.value if m.outcome else None,
            resolved_at=_iso(m.resolved_at),
        )


class FeeWithdrawalResponse(BaseModel):
    market_id: str
    withdrawn: int
    fee_collected: int
