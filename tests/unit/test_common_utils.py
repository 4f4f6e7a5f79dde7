"""Tests for pm_common.id_generator, datetime_utils and locks."""

import asyncio
from datetime import UTC, datetime, timedelta, timezone

import pytest

from src.pm_common.datetime_utils import SystemClock, ensure_utc, utc_now
from src.pm_common.enums import Outcome
from src.pm_common.id_generator import SnowflakeIdGenerator, generate_id
from src.pm_common.locks import KeyedLocks


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        assert isinstance(SnowflakeIdGenerator(machine_id=1).next_id(), str)

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        prev = int(generate_id())
        for _ in range(100):
            current = int(generate_id())
            assert current > prev
            prev = current


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo == UTC

    def test_system_clock(self) -> None:
        assert SystemClock().now().tzinfo == UTC

    def test_naive_treated_as_utc(self) -> None:
        assert ensure_utc(datetime(2026, 1, 1, 12)) == datetime(2026, 1, 1, 12, tzinfo=UTC)

    def test_aware_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        converted = ensure_utc(datetime(2026, 1, 1, 14, tzinfo=plus_two))
        assert converted == datetime(2026, 1, 1, 12, tzinfo=UTC)
        assert converted.tzinfo == UTC


class TestKeyedLocks:
    async def test_same_key_serializes(self) -> None:
        locks = KeyedLocks()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.lock_for("MKT-1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a-in", "a-out", "b-in", "b-out"]

    async def test_distinct_keys_do_not_block(self) -> None:
        locks = KeyedLocks()
        async with locks.lock_for("MKT-1"):
            async with locks.lock_for("MKT-2"):
                assert len(locks) == 2

    async def test_entry_dropped_after_release(self) -> None:
        locks = KeyedLocks()
        async with locks.lock_for("MKT-1"):
            assert len(locks) == 1
        assert len(locks) == 0

    async def test_entry_dropped_when_body_raises(self) -> None:
        locks = KeyedLocks()
        with pytest.raises(RuntimeError):
            async with locks.lock_for("NOPE"):
                raise RuntimeError("market not found")
        assert len(locks) == 0


class TestOutcome:
    def test_bool_round_trip(self) -> None:
        assert Outcome.from_bool(True) is Outcome.YES
        assert Outcome.from_bool(False) is Outcome.NO
        assert Outcome.NO.as_bool() is False
