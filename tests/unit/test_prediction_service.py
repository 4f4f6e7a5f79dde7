# tests/unit/test_prediction_service.py
"""Unit tests for PredictionApplicationService: deposits, claims, quotes."""
from datetime import timedelta

import pytest

from src.pm_clearing.domain.fee import BasisPointsFeePolicy, NoFeePolicy
from src.pm_common.enums import EscrowEntryType, MarketEventType, Outcome
from src.pm_common.errors import (
    AlreadyClaimedError,
    InsufficientOutputError,
    InvalidAmountError,
    MarketAlreadyResolvedError,
    MarketExpiredError,
    MarketNotFoundError,
    MarketNotResolvedError,
    PositionExistsError,
    PositionNotFoundError,
    PredictionLostError,
)
from src.pm_common.locks import market_locks
from src.pm_market.application.service import MarketApplicationService
from src.pm_position.application.service import PredictionApplicationService
from tests.unit.factories import RESOLUTION_TIME, make_market


@pytest.fixture
def markets_svc(market_repo, escrow, publisher, clock) -> MarketApplicationService:
    return MarketApplicationService(
        repo=market_repo, escrow=escrow, events=publisher, clock=clock
    )


@pytest.fixture
def svc(market_repo, position_repo, escrow, publisher, clock) -> PredictionApplicationService:
    return PredictionApplicationService(
        markets=market_repo,
        positions=position_repo,
        escrow=escrow,
        events=publisher,
        clock=clock,
        fee_policy=NoFeePolicy(),
    )


@pytest.fixture
async def open_market(markets_svc, db) -> str:
    await markets_svc.initialize_market(
        db, "alice", "MKT-1", "Will it rain tomorrow?", RESOLUTION_TIME, 1000
    )
    return "MKT-1"


class TestPlacePrediction:
    async def test_deposit_moves_collateral_and_pool(
        self, svc, db, open_market, market_repo, position_repo, escrow, publisher
    ) -> None:
        result = await svc.place_prediction(db, "bob", open_market, Outcome.YES, 500)

        # pool 500, deposit 500 -> 250 tokens
        assert result.position.tokens_received == 250
        assert result.yes_pool == 1000
        assert result.no_pool == 500
        assert market_repo.markets[open_market].yes_pool == 1000
        assert (open_market, "bob") in position_repo.positions
        assert escrow.vaults[open_market] == 1500
        assert escrow.ledger[-1] == (open_market, "bob", EscrowEntryType.DEPOSIT_IN, 500)
        assert publisher.recorded[-1].event_type is MarketEventType.PREDICTION_PLACED

    async def test_second_deposit_by_same_predictor_rejected(
        self, svc, db, open_market, escrow
    ) -> None:
        await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)
        with pytest.raises(PositionExistsError):
            await svc.place_prediction(db, "bob", open_market, Outcome.NO, 100)
        assert escrow.vaults[open_market] == 1100
        db.rollback.assert_awaited()

    async def test_expired_market(self, svc, db, clock, open_market) -> None:
        clock.current = RESOLUTION_TIME
        with pytest.raises(MarketExpiredError):
            await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)

    async def test_existing_predictor_after_deadline_gets_expired(
        self, svc, db, clock, open_market, escrow
    ) -> None:
        await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)
        clock.current = RESOLUTION_TIME
        with pytest.raises(MarketExpiredError):
            await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)
        assert escrow.vaults[open_market] == 1100

    async def test_existing_predictor_after_resolve_gets_already_resolved(
        self, svc, markets_svc, db, clock, open_market
    ) -> None:
        await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)
        clock.current = RESOLUTION_TIME
        await markets_svc.resolve_market(db, "alice", open_market, Outcome.NO)
        with pytest.raises(MarketAlreadyResolvedError):
            await svc.place_prediction(db, "bob", open_market, Outcome.YES, 100)

    async def test_zero_seed_market_rejects_deposits(
        self, svc, markets_svc, db, escrow
    ) -> None:
        await markets_svc.initialize_market(db, "alice", "EMPTY", "Q?", RESOLUTION_TIME, 0)
        with pytest.raises(InsufficientOutputError):
            await svc.place_prediction(db, "bob", "EMPTY", Outcome.YES, 1_000)
        assert escrow.vaults["EMPTY"] == 0

    async def test_invalid_amount_before_lookup(self, svc, db) -> None:
        with pytest.raises(InvalidAmountError):
            await svc.place_prediction(db, "bob", "NOPE", Outcome.YES, 0)

    async def test_missing_market(self, svc, db) -> None:
        with pytest.raises(MarketNotFoundError):
            await svc.place_prediction(db, "bob", "NOPE", Outcome.YES, 10)
        assert len(market_locks) == 0

    async def test_fee_credited_to_treasury(
        self, market_repo, position_repo, escrow, publisher, clock, markets_svc, db, open_market
    ) -> None:
        svc = PredictionApplicationService(
            markets=market_repo,
            positions=position_repo,
            escrow=escrow,
            events=publisher,
            clock=clock,
            fee_policy=BasisPointsFeePolicy(100),
        )
        result = await svc.place_prediction(db, "bob", open_market, Outcome.NO, 1000)

        assert result.fee_collected == 10
        assert result.no_pool == 500 + 990
        assert result.position.fee_paid == 10
        # gross amount escrowed
        assert escrow.vaults[open_market] == 2000


class TestClaimReward:
    async def _play(self, svc, markets_svc, db, clock, market_id: str, outcome: Outcome):
        await svc.place_prediction(db, "bob", market_id, Outcome.YES, 500)
        await svc.place_prediction(db, "carol", market_id, Outcome.NO, 300)
        clock.current = RESOLUTION_TIME + timedelta(minutes=1)
        await markets_svc.resolve_market(db, "alice", market_id, outcome)

    async def test_winner_claims(
        self, svc, markets_svc, db, clock, open_market, market_repo, position_repo, escrow
    ) -> None:
        await self._play(svc, markets_svc, db, clock, open_market, Outcome.YES)
        # YES pool 1000, NO pool 800, bob holds 250 tokens
        result = await svc.claim_reward(db, "bob", open_market)

        assert result.reward == 250 * 1800 // 1000
        assert result.total_paid_out == result.reward
        assert position_repo.positions[(open_market, "bob")].claimed is True
        assert market_repo.markets[open_market].total_paid_out == result.reward
        assert escrow.vaults[open_market] == 1800 - result.reward
        assert escrow.ledger[-1][2] is EscrowEntryType.REWARD_OUT

    async def test_double_claim_rejected(
        self, svc, markets_svc, db, clock, open_market, escrow
    ) -> None:
        await self._play(svc, markets_svc, db, clock, open_market, Outcome.YES)
        await svc.claim_reward(db, "bob", open_market)
        vault = escrow.vaults[open_market]

        with pytest.raises(AlreadyClaimedError):
            await svc.claim_reward(db, "bob", open_market)
        assert escrow.vaults[open_market] == vault

    async def test_loser_rejected(self, svc, markets_svc, db, clock, open_market) -> None:
        await self._play(svc, markets_svc, db, clock, open_market, Outcome.YES)
        with pytest.raises(PredictionLostError):
            await svc.claim_reward(db, "carol", open_market)

    async def test_unresolved_checked_before_position(self, svc, db, open_market) -> None:
        with pytest.raises(MarketNotResolvedError):
            await svc.claim_reward(db, "nobody", open_market)

    async def test_no_position(self, svc, markets_svc, db, clock, open_market) -> None:
        await self._play(svc, markets_svc, db, clock, open_market, Outcome.NO)
        with pytest.raises(PositionNotFoundError):
            await svc.claim_reward(db, "dave", open_market)

    async def test_vault_conserved_after_all_claims(
        self, svc, markets_svc, db, clock, open_market, market_repo, escrow
    ) -> None:
        await self._play(svc, markets_svc, db, clock, open_market, Outcome.NO)
        await svc.claim_reward(db, "carol", open_market)

        market = market_repo.markets[open_market]
        assert escrow.vaults[open_market] == (
            market.reservoir + market.fee_collected - market.total_paid_out
        )


class TestReads:
    async def test_get_position(self, svc, db, open_market) -> None:
        await svc.place_prediction(db, "bob", open_market, Outcome.NO, 100)
        position = await svc.get_position(db, open_market, "bob")
        assert position.prediction_type == "NO"
        assert position.claimed is False

    async def test_get_missing_position(self, svc, db, open_market) -> None:
        with pytest.raises(PositionNotFoundError):
            await svc.get_position(db, open_market, "bob")

    async def test_quote(self, svc, db, market_repo) -> None:
        market_repo.markets["MKT-Q"] = make_market(id="MKT-Q", yes_pool=900, no_pool=100)
        quote = await svc.quote(db, "MKT-Q", Outcome.YES, 100)
        assert quote.tokens_out == 90
        assert quote.pool_after == 1000
        assert market_repo.markets["MKT-Q"].yes_pool == 900
