import asyncio
import logging
from typing import Sequence
import asyncpg
from app.platform.ports.change_feed import ChangeFeedPort

log = logging.getLogger("feed.postgres")

_LOST = object()

class PostgresChangeFeed(ChangeFeedPort):
    """LISTEN/NOTIFY on one dedicated asyncpg connection."""

    def __init__(self, dsn: str):
        # asyncpg takes a plain libpq URL, not the SQLAlchemy dialect form
        self.dsn = dsn.replace("postgresql+asyncpg://", "postgresql://", 1)
        self._conn: asyncpg.Connection | None = None
        self._queue: asyncio.Queue = asyncio.Queue()

    def _on_notify(self, conn, pid, channel, payload):
        self._queue.put_nowait((channel, payload))

    def _on_terminate(self, conn):
        self._queue.put_nowait(_LOST)

    async def listen(self, channels: Sequence[str]) -> None:
        self._queue = asyncio.Queue()
        self._conn = await asyncpg.connect(self.dsn)
        self._conn.add_termination_listener(self._on_terminate)
        for channel in channels:
            await self._conn.add_listener(channel, self._on_notify)

    async def next(self) -> tuple[str, str]:
        item = await self._queue.get()
        if item is _LOST:
            raise ConnectionError("notification connection lost")
        return item

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None or conn.is_closed():
            return
        try:
            await conn.close(timeout=5)
        except (OSError, asyncpg.PostgresError):
            log.warning("Error while closing notification connection", exc_info=True)
