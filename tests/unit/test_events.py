"""Unit tests for market event payloads."""

from src.pm_common.enums import Outcome
from src.pm_events.domain.events import MarketCreated, PredictionPlaced, RewardClaimed
from tests.unit.factories import RESOLUTION_TIME, T0


def test_payload_excludes_envelope_and_serializes_values() -> None:
    event = MarketCreated(
        market_id="MKT-1",
        actor="alice",
        occurred_at=T0,
        question="Q?",
        resolution_time=RESOLUTION_TIME,
        initial_liquidity=1000,
        yes_pool=500,
        no_pool=500,
    )
    payload = event.payload()
    assert "market_id" not in payload
    assert "actor" not in payload
    assert payload["resolution_time"] == RESOLUTION_TIME.isoformat()
    assert payload["initial_liquidity"] == 1000


def test_enum_fields_serialized_by_value() -> None:
    event = PredictionPlaced(
        market_id="MKT-1",
        actor="bob",
        occurred_at=T0,
        side=Outcome.NO,
        amount=100,
        fee=0,
        tokens_received=50,
        yes_pool=900,
        no_pool=200,
    )
    assert event.payload()["side"] == "NO"


def test_message_envelope() -> None:
    event = RewardClaimed(market_id="MKT-1", actor="bob", occurred_at=T0, reward=135)
    message = event.to_message("evt-1")
    assert message == {
        "event_id": "evt-1",
        "event_type": "RewardClaimed",
        "market_id": "MKT-1",
        "actor": "bob",
        "occurred_at": T0.isoformat(),
        "payload": {"reward": 135},
    }
