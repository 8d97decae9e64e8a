from datetime import time, timedelta

from sqlalchemy.exc import OperationalError

from conftest import TODAY, add_slot, add_patient, book
from app.modules.doctors.models import Doctor, DoctorStatus
from app.modules.doctors.repository import DoctorRepository
from app.modules.doctors.service import DoctorService
from app.modules.realtime.broker import Broker
from app.modules.realtime.messages import DoctorStatusEvent
from app.modules.schedules.service import ScheduleService
from app.modules.tickets.models import Ticket, TicketStatus


async def _ticket(session, number, status):
    obj = Ticket(ticket_number=number, status=status, service_type="make_appointment")
    session.add(obj)
    await session.commit()
    return obj


async def test_screen_for_empty_cabinet(session):
    state = await DoctorService(session).screen_state(404)
    assert state["cabinet_number"] == 404
    assert state["doctor_name"] == ""
    assert state["doctor_status"] == "inactive"
    assert state["queue"] == []
    assert state["message"]


async def test_screen_queue_in_progress_first(session, doctor):
    patient = await add_patient(session, "Olga Smirnova")
    registered = await _ticket(session, "B001", TicketStatus.REGISTERED)
    walk_in = await _ticket(session, "A002", TicketStatus.IN_PROGRESS)
    waiting = await _ticket(session, "A003", TicketStatus.WAITING)
    await book(session, await add_slot(session, doctor, time(9, 0), time(9, 20)), patient, ticket_id=registered.id)
    await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50)), None, ticket_id=walk_in.id)
    await book(session, await add_slot(session, doctor, time(11, 0), time(11, 20)), patient, ticket_id=waiting.id)
    # another cabinet and another day stay off this board
    await book(session, await add_slot(session, doctor, time(12, 0), time(12, 20), cabinet=102), patient,
               ticket_id=(await _ticket(session, "A004", TicketStatus.REGISTERED)).id)
    await book(session, await add_slot(session, doctor, time(9, 0), time(9, 20), day=TODAY + timedelta(days=1)), patient,
               ticket_id=(await _ticket(session, "A005", TicketStatus.REGISTERED)).id)

    state = await DoctorService(session).screen_state(101)
    assert state["doctor_name"] == "Anna Petrova"
    assert state["doctor_specialty"] == "Therapist"
    assert state["doctor_status"] == "active"
    assert state["queue"] == [
        {"start_time": "10:30", "ticket_number": "A002", "patient_full_name": "Walk-in patient", "status": "in_progress"},
        {"start_time": "09:00", "ticket_number": "B001", "patient_full_name": "Olga Smirnova", "status": "registered"},
    ]


async def test_screen_keeps_identity_when_queue_fails(session, doctor, monkeypatch):
    await add_slot(session, doctor, time(9, 0), time(9, 20))

    async def broken(self, cabinet, day):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    monkeypatch.setattr(DoctorRepository, "cabinet_queue", broken)
    state = await DoctorService(session).screen_state(101)
    assert state["doctor_name"] == "Anna Petrova"
    assert state["queue"] == []


async def test_doctor_status_actions(session, doctor):
    broker = Broker()
    sub = broker.subscribe()
    svc = DoctorService(session, broker)

    obj, err = await svc.change_status(doctor.id, "start_break")
    assert err is None
    assert obj.status == DoctorStatus.ON_BREAK
    assert await sub.__anext__() == DoctorStatusEvent(doctor_id=doctor.id, status="on_break")

    obj, err = await svc.change_status(doctor.id, "start_break")
    assert err == "wrong_status"

    obj, err = await svc.change_status(doctor.id, "end_break")
    assert obj.status == DoctorStatus.ACTIVE

    assert await svc.change_status(doctor.id, "teleport") == (None, "unknown_action")
    assert await svc.change_status(999, "activate") == (None, "doctor_not_found")


async def test_today_snapshot_defaults_without_slots(session):
    snap = await ScheduleService(session).today_snapshot()
    assert snap == {
        "date": TODAY.isoformat(),
        "min_start_time": "09:00:00",
        "max_end_time": "18:00:00",
        "doctors": [],
    }


async def test_today_snapshot_groups_slots_by_doctor(session, doctor):
    other = Doctor(full_name="Ivan Sokolov", specialization="Cardiologist")
    session.add(other)
    await session.commit()
    late = await add_slot(session, doctor, time(14, 0), time(14, 30))
    early = await add_slot(session, doctor, time(8, 30), time(9, 0))
    await add_slot(session, other, time(10, 0), time(10, 20), cabinet=102, available=False)
    await add_slot(session, other, time(7, 0), time(7, 20), day=TODAY + timedelta(days=1))

    snap = await ScheduleService(session).today_snapshot()
    assert snap["min_start_time"] == "08:30:00"
    assert snap["max_end_time"] == "14:30:00"
    assert [d["full_name"] for d in snap["doctors"]] == ["Anna Petrova", "Ivan Sokolov"]
    assert [s["id"] for s in snap["doctors"][0]["slots"]] == [early.id, late.id]
    assert snap["doctors"][1]["slots"] == [
        {"id": snap["doctors"][1]["slots"][0]["id"], "start_time": "10:00:00", "end_time": "10:20:00",
         "is_available": False, "cabinet": 102},
    ]


async def test_slot_management(session, doctor):
    svc = ScheduleService(session)
    slot, err = await svc.create_slot(doctor_id=doctor.id, date=TODAY, start_time=time(9, 0), end_time=time(9, 20), cabinet=101)
    assert err is None
    assert slot.is_available is True

    assert await svc.create_slot(doctor_id=doctor.id, date=TODAY, start_time=time(9, 0), end_time=time(9, 30)) == (None, "slot_exists")
    assert await svc.create_slot(doctor_id=doctor.id, date=TODAY, start_time=time(9, 0), end_time=time(8, 0)) == (None, "invalid_interval")
    assert await svc.create_slot(doctor_id=999, date=TODAY, start_time=time(9, 0), end_time=time(9, 20)) == (None, "doctor_not_found")

    taken = await add_slot(session, doctor, time(11, 0), time(11, 20), available=False)
    assert await svc.delete_slot(taken.id) == (False, "slot_taken")
    assert await svc.delete_slot(slot.id) == (True, None)
    assert await svc.delete_slot(slot.id) == (False, "slot_not_found")
    assert await svc.cabinets() == [101]


async def test_doctor_schedule_rows(session, doctor):
    patient = await add_patient(session)
    slot = await add_slot(session, doctor, time(9, 0), time(9, 20))
    await add_slot(session, doctor, time(9, 20), time(9, 40))
    appt = await book(session, slot, patient)

    rows = await ScheduleService(session).doctor_schedule(doctor.id, TODAY, TODAY)
    assert len(rows) == 2
    assert rows[0]["appointment_id"] == appt.id
    assert rows[0]["patient_full_name"] == "Ivan Ivanov"
    assert rows[1]["appointment_id"] is None
    assert await ScheduleService(session).doctor_schedule(999, TODAY, TODAY) is None
