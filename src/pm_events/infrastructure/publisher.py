"""MarketEventPublisher — append-only event log plus Redis pub/sub broadcast.

record(): INSERT into market_events within the caller's transaction, so a
rolled-back operation leaves no event behind.
broadcast(): PUBLISH on "<prefix>:<market_id>" after commit. The durable row is
already committed at that point, so a Redis failure is logged, not raised.
"""

import json
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.id_generator import generate_id
from src.pm_common.redis_client import get_redis
from src.pm_events.domain.events import MarketEvent

logger = logging.getLogger(__name__)

_INSERT_EVENT_SQL = text("""
    INSERT INTO market_events (id, market_id, event_type, actor, payload, occurred_at)
    VALUES (:id, :market_id, :event_type, :actor, :payload, :occurred_at)
""")


class MarketEventPublisher:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        channel_prefix: str | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._channel_prefix = channel_prefix or settings.EVENT_CHANNEL_PREFIX

    def channel_for(self, market_id: str) -> str:
        return f"{self._channel_prefix}:{market_id}"

    async def record(self, db: AsyncSession, event: MarketEvent) -> str:
        event_id = generate_id()
        await db.execute(
            _INSERT_EVENT_SQL,
            {
                "id": event_id,
                "market_id": event.market_id,
                "event_type": event.event_type.value,
                "actor": event.actor,
                "payload": json.dumps(event.payload()),
                "occurred_at": event.occurred_at,
            },
        )
        return event_id

    async def broadcast(self, event: MarketEvent, event_id: str) -> None:
        message = json.dumps(event.to_message(event_id))
        try:
            client = await self._redis_factory()
            await client.publish(self.channel_for(event.market_id), message)
        except RedisError:
            logger.warning(
                "Event broadcast failed: type=%s market=%s event_id=%s",
                event.event_type.value,
                event.market_id,
                event_id,
                exc_info=True,
            )
