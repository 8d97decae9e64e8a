from datetime import time, timedelta

from conftest import TODAY, add_slot, add_patient, book
from app.modules.appointments.models import Appointment
from app.modules.appointments.service import AppointmentService
from app.modules.tickets.models import TicketStatus
from app.modules.tickets.service import TicketService


async def test_booking_marks_slot_taken(session, doctor):
    slot = await add_slot(session, doctor, time(11, 0), time(11, 20))
    patient = await add_patient(session)
    svc = AppointmentService(session)

    appt, err = await svc.create(slot.id, patient.id)
    assert err is None
    assert appt.schedule_id == slot.id
    assert appt.ticket_id is None
    await session.refresh(slot)
    assert slot.is_available is False


async def test_second_booking_of_a_slot_conflicts(session, doctor):
    # sequential only: concurrent bookings are serialized by the slot row lock
    # (SELECT ... FOR UPDATE), which only PostgreSQL enforces; SQLite ignores it
    slot = await add_slot(session, doctor, time(11, 0), time(11, 20))
    first = await add_patient(session, "Ivan Ivanov", "79001234567")
    second = await add_patient(session, "Olga Smirnova", "79007654321")
    svc = AppointmentService(session)

    _, err = await svc.create(slot.id, first.id)
    assert err is None
    appt, err = await svc.create(slot.id, second.id)
    assert appt is None
    assert err == "slot_taken"


async def test_booking_errors(session, doctor):
    svc = AppointmentService(session)
    assert await svc.create(999, None) == (None, "slot_not_found")

    slot = await add_slot(session, doctor, time(11, 0), time(11, 20))
    assert await svc.create(slot.id, 999) == (None, "patient_not_found")
    await session.refresh(slot)
    assert slot.is_available is True


async def test_cancelling_frees_slot(session, doctor):
    slot = await add_slot(session, doctor, time(11, 0), time(11, 20))
    svc = AppointmentService(session)
    appt, _ = await svc.create(slot.id, None)

    assert await svc.delete(appt.id) is True
    await session.refresh(slot)
    assert slot.is_available is True
    assert await session.get(Appointment, appt.id) is None
    assert await svc.delete(appt.id) is False


async def test_patient_appointments(session, doctor):
    patient = await add_patient(session)
    late = await add_slot(session, doctor, time(15, 0), time(15, 20))
    early = await add_slot(session, doctor, time(9, 0), time(9, 20))
    svc = AppointmentService(session)
    await svc.create(late.id, patient.id)
    await svc.create(early.id, patient.id)

    rows = await svc.for_patient(patient.id)
    assert [r["schedule_id"] for r in rows] == [early.id, late.id]
    assert rows[0]["doctor_full_name"] == "Anna Petrova"


async def test_check_in_by_phone(session, services, doctor):
    patient = await add_patient(session, phone="79001234567")
    appt = await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50)), patient)
    svc = TicketService(session)

    ticket, err = await svc.check_in_by_phone("+7 (900) 123-45-67")
    assert err is None
    assert ticket.ticket_number == "B001"
    assert ticket.service_type == "confirm_appointment"
    await session.refresh(appt)
    assert appt.ticket_id == ticket.id

    # the only appointment today now has a ticket
    _, err = await svc.check_in_by_phone("79001234567")
    assert err == "no_upcoming_appointment"


async def test_check_in_errors(session, services, doctor):
    svc = TicketService(session)
    assert await svc.check_in_by_phone("call me") == (None, "invalid_phone")
    assert await svc.check_in_by_phone("70000000000") == (None, "patient_not_found")

    patient = await add_patient(session, phone="79001234567")
    await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50), day=TODAY + timedelta(days=1)), patient)
    assert await svc.check_in_by_phone("79001234567") == (None, "no_upcoming_appointment")


async def test_confirm_appointment_registers_ticket(session, services, doctor):
    appt = await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50)))
    svc = TicketService(session)
    ticket, _ = await svc.create_ticket("make_appointment")
    await svc.call_next(window_number=1)

    obj, err = await svc.confirm_appointment(appt.id, ticket.id)
    assert err is None
    assert obj.ticket_id == ticket.id
    await session.refresh(ticket)
    assert ticket.status == TicketStatus.REGISTERED

    other, _ = await svc.create_ticket("make_appointment")
    assert await svc.confirm_appointment(appt.id, other.id) == (None, "already_confirmed")


async def test_confirming_completed_ticket_clears_completion(session, services, doctor):
    appt = await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50)))
    svc = TicketService(session)
    ticket, _ = await svc.create_ticket("make_appointment")
    done, _ = await svc.update_status(ticket.id, TicketStatus.COMPLETED)
    assert done.completed_at is not None

    _, err = await svc.confirm_appointment(appt.id, ticket.id)
    assert err is None
    await session.refresh(ticket)
    assert ticket.status == TicketStatus.REGISTERED
    assert ticket.completed_at is None


async def test_confirm_appointment_errors(session, services, doctor):
    appt = await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50)))
    svc = TicketService(session)
    assert await svc.confirm_appointment(999, 1) == (None, "appointment_not_found")
    assert await svc.confirm_appointment(appt.id, 999) == (None, "ticket_not_found")

    ticket, _ = await svc.create_ticket("make_appointment")
    await svc.update_status(ticket.id, TicketStatus.IN_PROGRESS)
    assert await svc.confirm_appointment(appt.id, ticket.id) == (None, "wrong_status")
    await session.refresh(appt)
    assert appt.ticket_id is None


async def test_registrar_list_and_daily_report(session, services, doctor, fixed_clock):
    patient = await add_patient(session)
    appt = await book(session, await add_slot(session, doctor, time(10, 30), time(10, 50), cabinet=205), patient)
    svc = TicketService(session)
    ticket, _ = await svc.create_ticket("make_appointment")
    walk_in, _ = await svc.create_ticket("analysis_results")
    await svc.call_next(window_number=1, categories=["A"])
    await svc.confirm_appointment(appt.id, ticket.id)

    rows = await svc.registrar_tickets(None)
    by_number = {r["ticket"].ticket_number: r for r in rows}
    assert by_number["A001"]["appointment_time"] == "2024-03-11 10:30:00"
    assert by_number["C001"]["appointment_time"] is None

    only_c = await svc.registrar_tickets(None, "C")
    assert [r["ticket"].id for r in only_c] == [walk_in.id]

    await svc.start_appointment(ticket.id)
    fixed_clock["now"] += timedelta(minutes=12, seconds=5)
    await svc.complete_appointment(ticket.id)

    report = {r["ticket_number"]: r for r in await svc.daily_report()}
    row = report["A001"]
    assert row["doctor_full_name"] == "Anna Petrova"
    assert row["cabinet_number"] == 205
    assert row["appointment_time"] == "10:30"
    assert row["status"] == TicketStatus.COMPLETED
    assert row["duration"] == "00:12:05"
    assert report["C001"]["duration"] is None
