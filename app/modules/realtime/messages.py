"""Change notifications decoded once, at the point they enter the process.

Raw payloads come from the `ticket_update` and `schedule_update` channels. Anything that
does not parse into a known shape becomes an `UnknownEvent` and is ignored by the boards.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Union

log = logging.getLogger("realtime.messages")

TICKET_CHANNEL = "ticket_update"
SCHEDULE_CHANNEL = "schedule_update"
CHANNELS = (TICKET_CHANNEL, SCHEDULE_CHANNEL)

@dataclass(frozen=True)
class TicketEvent:
    action: str
    data: dict = field(default_factory=dict)

@dataclass(frozen=True)
class ScheduleEvent:
    operation: str
    data: dict = field(default_factory=dict)

@dataclass(frozen=True)
class DoctorStatusEvent:
    doctor_id: int
    status: str

@dataclass(frozen=True)
class UnknownEvent:
    channel: str
    raw: str

Notification = Union[TicketEvent, ScheduleEvent, DoctorStatusEvent, UnknownEvent]

def decode(channel: str, payload: str) -> Notification:
    try:
        body = json.loads(payload)
    except (TypeError, ValueError):
        log.debug("Undecodable payload on %s: %.200s", channel, payload)
        return UnknownEvent(channel, payload)
    if not isinstance(body, dict):
        return UnknownEvent(channel, payload)

    if channel == TICKET_CHANNEL:
        data = body.get("data")
        if isinstance(body.get("action"), str) and isinstance(data, dict) and "ticket_number" in data:
            return TicketEvent(body["action"], data)
    elif channel == SCHEDULE_CHANNEL:
        if isinstance(body.get("operation"), str):
            data = body.get("data")
            return ScheduleEvent(body["operation"], data if isinstance(data, dict) else {})
    return UnknownEvent(channel, payload)
