# tests/unit/test_position_persistence.py
"""Unit tests for PositionRepository using MagicMock AsyncSession."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_common.enums import Outcome
from src.pm_common.errors import AlreadyClaimedError, PositionExistsError
from src.pm_position.infrastructure.persistence import PositionRepository
from tests.unit.factories import RESOLUTION_TIME, T0, make_position


def _position_row(**kwargs):
    row = MagicMock()
    row.market_id = "MKT-1"
    row.predictor = "bob"
    row.prediction_type = kwargs.get("prediction_type", "YES")
    row.amount_deposited = Decimal(100)
    row.tokens_received = Decimal(90)
    row.fee_paid = Decimal(0)
    row.claimed = kwargs.get("claimed", False)
    row.claimed_at = kwargs.get("claimed_at")
    row.reward_paid = Decimal(kwargs.get("reward_paid", 0))
    row.created_at = T0
    return row


def _db_returning(row) -> MagicMock:
    db = MagicMock()
    result_mock = MagicMock()
    result_mock.fetchone.return_value = row
    db.execute = AsyncMock(return_value=result_mock)
    return db


@pytest.mark.asyncio
async def test_get_position_maps_row():
    db = _db_returning(_position_row(prediction_type="NO"))
    position = await PositionRepository().get_position(db, "MKT-1", "bob")

    assert position.prediction_type is Outcome.NO
    assert position.tokens_received == 90
    assert isinstance(position.amount_deposited, int)
    assert position.claimed is False


@pytest.mark.asyncio
async def test_get_position_missing():
    db = _db_returning(None)
    assert await PositionRepository().get_position_for_update(db, "MKT-1", "bob") is None


@pytest.mark.asyncio
async def test_insert_conflict_maps_to_position_exists():
    db = _db_returning(None)
    with pytest.raises(PositionExistsError):
        await PositionRepository().insert_position(db, make_position())


@pytest.mark.asyncio
async def test_mark_claimed_writes_reward():
    position = make_position(claimed=True, claimed_at=RESOLUTION_TIME, reward_paid=135)
    db = _db_returning(MagicMock())
    await PositionRepository().mark_claimed(db, position)

    params = db.execute.call_args.args[1]
    assert params["reward_paid"] == 135
    assert params["claimed_at"] == RESOLUTION_TIME
    assert "claimed = FALSE" in str(db.execute.call_args.args[0])


@pytest.mark.asyncio
async def test_mark_claimed_lost_race():
    db = _db_returning(None)
    with pytest.raises(AlreadyClaimedError):
        await PositionRepository().mark_claimed(db, make_position(claimed=True))


@pytest.mark.asyncio
async def test_summarize_market_converts_to_int():
    row = MagicMock()
    for name in (
        "positions", "yes_positions", "no_positions", "total_deposited",
        "yes_tokens", "no_tokens", "claimed_positions", "total_reward_paid",
    ):
        setattr(row, name, Decimal(3))
    db = _db_returning(row)

    summary = await PositionRepository().summarize_market(db, "MKT-1")

    assert summary["positions"] == 3
    assert all(isinstance(v, int) for v in summary.values())
