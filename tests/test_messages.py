import json

from app.modules.realtime.messages import (
    SCHEDULE_CHANNEL, TICKET_CHANNEL, ScheduleEvent, TicketEvent, UnknownEvent, decode,
)


def test_ticket_payload():
    payload = json.dumps({"action": "update", "data": {"id": 4, "ticket_number": "A004", "status": "invited"}})
    msg = decode(TICKET_CHANNEL, payload)
    assert isinstance(msg, TicketEvent)
    assert msg.action == "update"
    assert msg.data["ticket_number"] == "A004"


def test_ticket_payload_without_number_is_unknown():
    payload = json.dumps({"action": "update", "data": {"id": 4}})
    assert isinstance(decode(TICKET_CHANNEL, payload), UnknownEvent)


def test_schedule_payload():
    payload = json.dumps({"operation": "UPDATE", "data": {"id": 9, "is_available": False}})
    msg = decode(SCHEDULE_CHANNEL, payload)
    assert msg == ScheduleEvent("UPDATE", {"id": 9, "is_available": False})


def test_schedule_payload_without_data():
    assert decode(SCHEDULE_CHANNEL, '{"operation": "DELETE"}') == ScheduleEvent("DELETE", {})


def test_garbage_is_unknown():
    for channel, payload in [
        (TICKET_CHANNEL, "not json"),
        (TICKET_CHANNEL, "[1, 2]"),
        (SCHEDULE_CHANNEL, '{"op": "INSERT"}'),
        ("other_channel", '{"operation": "INSERT"}'),
    ]:
        msg = decode(channel, payload)
        assert isinstance(msg, UnknownEvent)
        assert msg.channel == channel
        assert msg.raw == payload
