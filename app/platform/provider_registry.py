from app.core.config import settings
from app.platform.ports.change_feed import ChangeFeedPort
from app.platform.adapters.feed_postgres import PostgresChangeFeed
from app.platform.adapters.feed_redis import RedisChangeFeed

class ProviderRegistry:
    _change_feed: ChangeFeedPort | None = None

    @classmethod
    def change_feed(cls) -> ChangeFeedPort | None:
        """Configured notification source, or None when live updates are switched off."""
        if cls._change_feed is None:
            prov = (settings.CHANGE_FEED_PROVIDER or "postgres").lower()
            if prov == "none":
                return None
            if prov == "redis":
                cls._change_feed = RedisChangeFeed()
            else:
                cls._change_feed = PostgresChangeFeed(settings.POSTGRES_DSN)
        return cls._change_feed

registry = ProviderRegistry()
