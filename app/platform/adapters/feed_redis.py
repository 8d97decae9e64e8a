import logging
from typing import Sequence
from redis.asyncio import from_url as redis_from_url
from redis.exceptions import RedisError
from app.platform.ports.change_feed import ChangeFeedPort
from app.core.config import settings

log = logging.getLogger("feed.redis")

class RedisChangeFeed(ChangeFeedPort):
    """Same channel names over Redis pub/sub, for deployments where a relay republishes NOTIFYs."""

    def __init__(self):
        if not settings.REDIS_URL:
            raise RuntimeError("REDIS_URL not configured")
        self.redis = redis_from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        self._pubsub = None

    async def listen(self, channels: Sequence[str]) -> None:
        self._pubsub = self.redis.pubsub()
        await self._pubsub.subscribe(*channels)

    async def next(self) -> tuple[str, str]:
        while True:
            msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=None)
            if msg and msg.get("type") == "message":
                log.debug("[REDIS FEED] channel=%s", msg["channel"])
                return msg["channel"], msg["data"]

    async def close(self) -> None:
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.aclose()
        except RedisError:
            log.warning("Error while closing Redis pub/sub", exc_info=True)
