import itertools
import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from app.modules.realtime.messages import Notification

log = logging.getLogger("realtime.broker")

class Subscription:
    """Receiving end of one subscriber; iterate it until the broker closes it."""

    def __init__(self, sid: int, receive: MemoryObjectReceiveStream):
        self.id = sid
        self._receive = receive

    def __aiter__(self):
        return self

    async def __anext__(self) -> Notification:
        try:
            return await self._receive.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            raise StopAsyncIteration

    def close(self) -> None:
        self._receive.close()

class Broker:
    """In-process fan-out of change notifications to live board connections.

    Every subscriber gets its own bounded stream. `publish` never waits: a subscriber whose
    buffer is full simply misses that message, since the next one carries fresh state anyway.
    One plain lock guards the subscriber map for subscribe, unsubscribe and publish alike;
    publish only does non-blocking sends while holding it.
    """

    def __init__(self, buffer_size: int = 10):
        self.buffer_size = buffer_size
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[int, MemoryObjectSendStream] = {}

    def subscribe(self) -> Subscription:
        send, receive = anyio.create_memory_object_stream(max_buffer_size=self.buffer_size)
        with self._lock:
            sid = next(self._ids)
            self._subscribers[sid] = send
        log.debug("Subscriber %s joined (%d total)", sid, len(self._subscribers))
        return Subscription(sid, receive)

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            send = self._subscribers.pop(sub.id, None)
        if send is None:
            return
        # buffered messages stay readable; the iterator stops after them
        send.close()
        log.debug("Subscriber %s left", sub.id)

    def publish(self, message: Notification) -> int:
        """Offer `message` to every subscriber; returns how many accepted it."""
        delivered = 0
        with self._lock:
            for sid, send in self._subscribers.items():
                try:
                    send.send_nowait(message)
                    delivered += 1
                except anyio.WouldBlock:
                    log.warning("Subscriber %s buffer full, message dropped", sid)
                except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                    log.debug("Subscriber %s is gone, message dropped", sid)
        return delivered

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @asynccontextmanager
    async def subscription(self) -> AsyncIterator[Subscription]:
        sub = self.subscribe()
        try:
            yield sub
        finally:
            self.unsubscribe(sub)
            sub.close()
