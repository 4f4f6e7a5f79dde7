"""Unit-test fixtures: in-memory collaborators and a fixed clock."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.unit.factories import (
    FakeEscrow,
    FakeMarketRepository,
    FakePositionRepository,
    FakePublisher,
    FixedClock,
)


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def market_repo() -> FakeMarketRepository:
    return FakeMarketRepository()


@pytest.fixture
def position_repo() -> FakePositionRepository:
    return FakePositionRepository()


@pytest.fixture
def escrow() -> FakeEscrow:
    return FakeEscrow()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()
