"""PositionRepository — concrete implementation of PositionRepositoryProtocol.

The (market_id, predictor) key backs the one-position-per-participant rule: a
conflicting INSERT returns no row. The claim UPDATE is conditional on
claimed = FALSE so a lost race cannot pay twice.
Transaction ownership stays with the application service.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_common.errors import AlreadyClaimedError, PositionExistsError
from src.pm_position.domain.models import Position

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_POSITION_COLUMNS = """
    market_id, predictor, prediction_type, amount_deposited, tokens_received,
    fee_paid, claimed, claimed_at, reward_paid, created_at
"""

_GET_POSITION_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE market_id = :market_id AND predictor = :predictor
""")

_GET_POSITION_FOR_UPDATE_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions
    WHERE market_id = :market_id AND predictor = :predictor
    FOR UPDATE
""")

_INSERT_POSITION_SQL = text("""
    INSERT INTO positions
        (market_id, predictor, prediction_type, amount_deposited, tokens_received,
         fee_paid, claimed, created_at)
    VALUES
        (:market_id, :predictor, :prediction_type, :amount_deposited, :tokens_received,
         :fee_paid, FALSE, :created_at)
    ON CONFLICT (market_id, predictor) DO NOTHING
    RETURNING market_id
""")

_MARK_CLAIMED_SQL = text("""
    UPDATE positions
    SET claimed = TRUE,
        claimed_at = :claimed_at,
        reward_paid = :reward_paid,
        updated_at = NOW()
    WHERE market_id = :market_id AND predictor = :predictor AND claimed = FALSE
    RETURNING market_id
""")

_SUMMARY_SQL = text("""
    SELECT
        COUNT(*) AS positions,
        COALESCE(SUM(CASE WHEN prediction_type = 'YES' THEN 1 ELSE 0 END), 0) AS yes_positions,
        COALESCE(SUM(CASE WHEN prediction_type = 'NO' THEN 1 ELSE 0 END), 0) AS no_positions,
        COALESCE(SUM(amount_deposited), 0) AS total_deposited,
        COALESCE(SUM(CASE WHEN prediction_type = 'YES' THEN tokens_received ELSE 0 END), 0)
            AS yes_tokens,
        COALESCE(SUM(CASE WHEN prediction_type = 'NO' THEN tokens_received ELSE 0 END), 0)
            AS no_tokens,
        COALESCE(SUM(CASE WHEN claimed THEN 1 ELSE 0 END), 0) AS claimed_positions,
        COALESCE(SUM(reward_paid), 0) AS total_reward_paid
    FROM positions
    WHERE market_id = :market_id
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_position(row: Any) -> Position:
    return Position(
        market_id=row.market_id,
        predictor=row.predictor,
        prediction_type=Outcome(row.prediction_type),
        amount_deposited=int(row.amount_deposited),
        tokens_received=int(row.tokens_received),
        fee_paid=int(row.fee_paid),
        claimed=bool(row.claimed),
        claimed_at=row.claimed_at,
        reward_paid=int(row.reward_paid),
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PositionRepository:
    async def get_position(
        self, db: AsyncSession, market_id: str, predictor: str
    ) -> Position | None:
        result = await db.execute(
            _GET_POSITION_SQL, {"market_id": market_id, "predictor": predictor}
        )
        row = result.fetchone()
        return _row_to_position(row) if row else None

    async def get_position_for_update(
        self, db: AsyncSession, market_id: str, predictor: str
    ) -> Position | None:
        result = await db.execute(
            _GET_POSITION_FOR_UPDATE_SQL, {"market_id": market_id, "predictor": predictor}
        )
        row = result.fetchone()
        return _row_to_position(row) if row else None

    async def insert_position(self, db: AsyncSession, position: Position) -> None:
        result = await db.execute(
            _INSERT_POSITION_SQL,
            {
                "market_id": position.market_id,
                "predictor": position.predictor,
                "prediction_type": position.prediction_type.value,
                "amount_deposited": position.amount_deposited,
                "tokens_received": position.tokens_received,
                "fee_paid": position.fee_paid,
                "created_at": position.created_at,
            },
        )
        if result.fetchone() is None:
            raise PositionExistsError(position.market_id, position.predictor)

    async def mark_claimed(self, db: AsyncSession, position: Position) -> None:
        result = await db.execute(
            _MARK_CLAIMED_SQL,
            {
                "market_id": position.market_id,
                "predictor": position.predictor,
                "claimed_at": position.claimed_at,
                "reward_paid": position.reward_paid,
            },
        )
        if result.fetchone() is None:
            raise AlreadyClaimedError(position.market_id, position.predictor)

    async def summarize_market(self, db: AsyncSession, market_id: str) -> dict[str, Any]:
        row = (await db.execute(_SUMMARY_SQL, {"market_id": market_id})).fetchone()
        return {
            "positions": int(row.positions),
            "yes_positions": int(row.yes_positions),
            "no_positions": int(row.no_positions),
            "total_deposited": int(row.total_deposited),
            "yes_tokens": int(row.yes_tokens),
            "no_tokens": int(row.no_tokens),
            "claimed_positions": int(row.claimed_positions),
            "total_reward_paid": int(row.total_reward_paid),
        }
