"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
Amount columns are NUMERIC(20,0) (full u64 range); asyncpg returns Decimal, so the
row mapper converts back to int.
Conditional writes (ON CONFLICT DO NOTHING, WHERE resolved = FALSE) return 0 rows
when a concurrent writer won; that is surfaced as the matching typed error.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InvalidOutcomeError,
    MarketAlreadyExistsError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
)
from src.pm_market.domain.models import UNRESOLVED, Market, Resolution, Resolved

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, question, creator, created_at, resolution_time,
    yes_pool, no_pool, total_liquidity, fee_collected, total_paid_out,
    resolved, outcome, resolved_at, updated_at
"""

_GET_MARKET_SQL = text(f"SELECT {_MARKET_COLUMNS} FROM markets WHERE id = :market_id")

_GET_MARKET_FOR_UPDATE_SQL = text(
    f"SELECT {_MARKET_COLUMNS} FROM markets WHERE id = :market_id FOR UPDATE"
)

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets
        (id, question, creator, created_at, resolution_time,
         yes_pool, no_pool, total_liquidity, fee_collected, total_paid_out,
         resolved, outcome, resolved_at, updated_at)
    VALUES
        (:id, :question, :creator, :created_at, :resolution_time,
         :yes_pool, :no_pool, :total_liquidity, 0, 0,
         FALSE, NULL, NULL, :created_at)
    ON CONFLICT (id) DO NOTHING
    RETURNING id
""")

_UPDATE_BALANCES_SQL = text("""
    UPDATE markets
    SET yes_pool = :yes_pool,
        no_pool = :no_pool,
        fee_collected = :fee_collected,
        total_paid_out = :total_paid_out,
        updated_at = NOW()
    WHERE id = :id
    RETURNING id
""")

_UPDATE_RESOLUTION_SQL = text("""
    UPDATE markets
    SET resolved = TRUE,
        outcome = :outcome,
        resolved_at = :resolved_at,
        updated_at = NOW()
    WHERE id = :id AND resolved = FALSE
    RETURNING id
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:resolved AS BOOLEAN) IS NULL OR resolved = CAST(:resolved AS BOOLEAN))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_resolution(row: object) -> Resolution:
    if not row.resolved:  # type: ignore[attr-defined]
        return UNRESOLVED
    if row.outcome is None:  # type: ignore[attr-defined]
        raise InvalidOutcomeError(row.id)  # type: ignore[attr-defined]
    return Resolved(
        outcome=Outcome(row.outcome),  # type: ignore[attr-defined]
        resolved_at=row.resolved_at or row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        question=row.question,  # type: ignore[attr-defined]
        creator=row.creator,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        resolution_time=row.resolution_time,  # type: ignore[attr-defined]
        yes_pool=int(row.yes_pool),  # type: ignore[attr-defined]
        no_pool=int(row.no_pool),  # type: ignore[attr-defined]
        total_liquidity=int(row.total_liquidity),  # type: ignore[attr-defined]
        fee_collected=int(row.fee_collected),  # type: ignore[attr-defined]
        total_paid_out=int(row.total_paid_out),  # type: ignore[attr-defined]
        resolution=_row_to_resolution(row),
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


_STATUS_FILTER: dict[str | None, bool | None] = {
    None: None,
    "OPEN": False,
    "RESOLVED": True,
}

# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository. Mutations run inside the caller's transaction."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_market_for_update(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_FOR_UPDATE_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def insert_market(self, db: AsyncSession, market: Market) -> None:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "id": market.id,
                "question": market.question,
                "creator": market.creator,
                "created_at": market.created_at,
                "resolution_time": market.resolution_time,
                "yes_pool": market.yes_pool,
                "no_pool": market.no_pool,
                "total_liquidity": market.total_liquidity,
            },
        )
        if result.fetchone() is None:
            raise MarketAlreadyExistsError(market.id)

    async def update_balances(self, db: AsyncSession, market: Market) -> None:
        result = await db.execute(
            _UPDATE_BALANCES_SQL,
            {
                "id": market.id,
                "yes_pool": market.yes_pool,
                "no_pool": market.no_pool,
                "fee_collected": market.fee_collected,
                "total_paid_out": market.total_paid_out,
            },
        )
        if result.fetchone() is None:
            raise MarketNotFoundError(market.id)

    async def update_resolution(self, db: AsyncSession, market: Market) -> None:
        outcome = market.require_outcome()
        result = await db.execute(
            _UPDATE_RESOLUTION_SQL,
            {
                "id": market.id,
                "outcome": outcome.value,
                "resolved_at": market.resolved_at,
            },
        )
        if result.fetchone() is None:
            raise MarketAlreadyResolvedError(market.id)

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters,
        # not an ISO string.  Parse the cursor timestamp here.
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_MARKETS_SQL,
            {
                "resolved": _STATUS_FILTER.get(status),
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_market(row) for row in result.fetchall()]
