"""Server-sent event generators for the live boards.

Each generator subscribes before it reads any initial state, so nothing published in
between is lost, and leaves the broker when the client goes away.
"""
import json
import logging
from typing import AsyncIterator, Awaitable, Callable
from app.modules.realtime.broker import Broker
from app.modules.realtime.messages import TicketEvent, ScheduleEvent, DoctorStatusEvent

log = logging.getLogger("realtime.streams")

Snapshot = Callable[[], Awaitable[dict]]

def sse(event: str, data) -> str:
    return f"event: {event}\ndata: {json.dumps(data, default=str, ensure_ascii=False)}\n\n"

async def reception_stream(broker: Broker) -> AsyncIterator[str]:
    async with broker.subscription() as sub:
        async for msg in sub:
            if isinstance(msg, TicketEvent):
                yield sse(msg.action, msg.data)

async def doctor_stream(broker: Broker, snapshot: Snapshot) -> AsyncIterator[str]:
    async with broker.subscription() as sub:
        yield sse("state_update", await snapshot())
        async for msg in sub:
            if isinstance(msg, (TicketEvent, ScheduleEvent, DoctorStatusEvent)):
                yield sse("state_update", await snapshot())

async def schedule_stream(broker: Broker, snapshot: Snapshot) -> AsyncIterator[str]:
    async with broker.subscription() as sub:
        yield sse("schedule_initial", await snapshot())
        async for msg in sub:
            if isinstance(msg, ScheduleEvent):
                yield sse("schedule_update", await snapshot())
