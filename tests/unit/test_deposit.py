"""Unit tests for quote_prediction / place_prediction."""

from datetime import timedelta

import pytest

from src.pm_clearing.domain.fee import BasisPointsFeePolicy, NoFeePolicy
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InsufficientOutputError,
    InvalidAmountError,
    MarketAlreadyResolvedError,
    MarketExpiredError,
)
from src.pm_market.domain.lifecycle import resolve_market
from src.pm_position.domain.deposit import place_prediction, quote_prediction
from tests.unit.factories import RESOLUTION_TIME, T0, make_market

NO_FEE = NoFeePolicy()


class TestPlacePrediction:
    def test_yes_deposit_grows_only_yes_pool(self) -> None:
        market = make_market(yes_pool=900, no_pool=100)
        position, quote, event = place_prediction(market, "bob", Outcome.YES, 100, T0, NO_FEE)

        assert position.tokens_received == 90
        assert position.amount_deposited == 100
        assert position.prediction_type is Outcome.YES
        assert position.claimed is False
        assert (market.yes_pool, market.no_pool) == (1000, 100)
        assert quote.pool_before == 900
        assert event.tokens_received == 90
        assert (event.yes_pool, event.no_pool) == (1000, 100)

    def test_no_deposit_grows_only_no_pool(self) -> None:
        market = make_market(yes_pool=900, no_pool=100)
        position, _, _ = place_prediction(market, "bob", Outcome.NO, 100, T0, NO_FEE)

        assert position.tokens_received == 50
        assert (market.yes_pool, market.no_pool) == (900, 200)

    def test_zero_seed_market_cannot_bootstrap(self) -> None:
        market = make_market(yes_pool=0, no_pool=0, total_liquidity=0)
        with pytest.raises(InsufficientOutputError):
            place_prediction(market, "bob", Outcome.YES, 1_000, T0, NO_FEE)
        assert market.yes_pool == 0

    def test_dust_deposit_rejected(self) -> None:
        market = make_market(yes_pool=1, no_pool=1)
        with pytest.raises(InsufficientOutputError):
            place_prediction(market, "bob", Outcome.YES, 1, T0, NO_FEE)

    def test_zero_amount_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            place_prediction(make_market(), "bob", Outcome.YES, 0, T0, NO_FEE)

    def test_expired_market_rejected(self) -> None:
        market = make_market()
        with pytest.raises(MarketExpiredError):
            place_prediction(market, "bob", Outcome.YES, 100, RESOLUTION_TIME, NO_FEE)
        assert market.yes_pool == 500

    def test_resolved_market_rejected(self) -> None:
        market = make_market()
        resolve_market(market, "alice", Outcome.YES, RESOLUTION_TIME)
        with pytest.raises(MarketAlreadyResolvedError):
            place_prediction(
                market, "bob", Outcome.YES, 100, RESOLUTION_TIME + timedelta(1), NO_FEE
            )

    def test_fee_carved_out_before_pricing(self) -> None:
        market = make_market(yes_pool=900, no_pool=100)
        position, quote, _ = place_prediction(
            market, "bob", Outcome.YES, 1000, T0, BasisPointsFeePolicy(100)
        )
        assert quote.fee == 10
        assert quote.net_amount == 990
        assert market.yes_pool == 900 + 990
        assert market.fee_collected == 10
        assert position.fee_paid == 10
        assert position.amount_deposited == 1000


class TestQuotePrediction:
    def test_quote_does_not_mutate(self) -> None:
        market = make_market(yes_pool=900, no_pool=100)
        quote = quote_prediction(market, Outcome.YES, 100, NO_FEE)

        assert quote.tokens_out == 90
        assert quote.pool_after == 1000
        assert market.yes_pool == 900

    def test_quote_matches_placement(self) -> None:
        market = make_market(yes_pool=1234, no_pool=567)
        quote = quote_prediction(market, Outcome.NO, 333, NO_FEE)
        position, _, _ = place_prediction(market, "bob", Outcome.NO, 333, T0, NO_FEE)
        assert quote.tokens_out == position.tokens_received
