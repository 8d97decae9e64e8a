import logging
from datetime import date, datetime, timedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core import clock
from app.core.config import settings
from app.modules.tickets import lifecycle
from app.modules.tickets.lifecycle import Action
from app.modules.tickets.models import Ticket, TicketStatus
from app.modules.tickets.repository import TicketRepository, ReceptionLogRepository
from app.modules.catalogs.repository import CatalogRepository
from app.modules.appointments.repository import AppointmentRepository
from app.modules.patients.repository import PatientRepository, normalize_phone
from app.modules.registrars.repository import PriorityRepository

log = logging.getLogger(__name__)

CHECK_IN_SERVICE = "confirm_appointment"
REGISTRAR_STATUSES = [TicketStatus.WAITING, TicketStatus.REGISTERED, TicketStatus.COMPLETED]

def format_number(letter: str, num: int) -> str:
    return f"{letter}{num:03d}"

def next_suffix(current_max: int, ceiling: int) -> int:
    num = current_max + 1
    return 1 if num >= ceiling else num

class TicketService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.tickets = TicketRepository(session)
        self.logs = ReceptionLogRepository(session)
        self.catalog = CatalogRepository(session)
        self.appts = AppointmentRepository(session)
        self.patients = PatientRepository(session)
        self.priorities = PriorityRepository(session)

    # ---- Issuing ----
    async def _allocate_number(self, service_id: str) -> tuple[str | None, str | None]:
        service = await self.catalog.get_by_service_id(service_id)
        if not service:
            return None, "unknown_service"
        current = await self.tickets.max_suffix(service.letter)
        return format_number(service.letter, next_suffix(current, settings.TICKET_NUMBER_CEILING)), None

    async def create_ticket(self, service_id: str) -> tuple[Ticket | None, str | None]:
        number, err = await self._allocate_number(service_id)
        if err:
            log.warning("Ticket requested for unknown service %r", service_id)
            return None, err
        obj = await self.tickets.create(
            ticket_number=number, status=TicketStatus.WAITING, service_type=service_id, created_at=clock.now()
        )
        await self.session.commit()
        log.info("Issued ticket %s for service %s", number, service_id)
        return obj, None

    async def check_in_by_phone(self, phone: str) -> tuple[Ticket | None, str | None]:
        if not normalize_phone(phone):
            return None, "invalid_phone"
        patient = await self.patients.find_by_phone(phone)
        if not patient:
            return None, "patient_not_found"
        now = clock.now()
        appt = await self.appts.next_unticketed_for_patient(patient.id, now.date())
        if not appt:
            return None, "no_upcoming_appointment"
        number, err = await self._allocate_number(CHECK_IN_SERVICE)
        if err:
            return None, err
        # ticket and appointment link commit together
        ticket = await self.tickets.create(
            ticket_number=number, status=TicketStatus.WAITING, service_type=CHECK_IN_SERVICE, created_at=now
        )
        appt.ticket_id = ticket.id
        await self.session.commit()
        log.info("Patient %s checked in for appointment %s with ticket %s", patient.id, appt.id, number)
        return ticket, None

    # ---- Registrar calls ----
    async def _prefixes(self, registrar_id: int | None, categories: list[str] | None) -> list[str]:
        if categories:
            return list(categories)
        if registrar_id is None:
            return []
        return await self.priorities.letters_for(registrar_id)

    async def _invite(self, ticket: Ticket, window_number: int, registrar_id: int | None, now: datetime) -> None:
        ticket.status = lifecycle.target(Action.CALL)
        ticket.window_number = window_number
        ticket.called_at = now
        await self.session.flush()
        try:
            async with self.session.begin_nested():
                await self.logs.create(ticket_id=ticket.id, registrar_id=registrar_id, window_number=window_number, called_at=now)
        except SQLAlchemyError:
            log.exception("Failed to write reception log for ticket %s", ticket.ticket_number)

    async def call_next(self, window_number: int, registrar_id: int | None = None, categories: list[str] | None = None) -> tuple[Ticket | None, str | None]:
        now = clock.now()
        prefixes = await self._prefixes(registrar_id, categories)
        ticket = await self.tickets.next_waiting(prefixes, now, timedelta(minutes=settings.CALL_NEXT_SOON_MINUTES))
        if not ticket:
            await self.session.rollback()
            return None, "queue_empty"
        await self._invite(ticket, window_number, registrar_id, now)
        await self.session.commit()
        log.info("Window %s called ticket %s", window_number, ticket.ticket_number)
        return ticket, None

    async def call_specific(self, ticket_id: int, window_number: int, registrar_id: int | None = None) -> tuple[Ticket | None, str | None]:
        ticket = await self.tickets.get(ticket_id, for_update=True)
        if not ticket:
            return None, "not_found"
        if not lifecycle.can(Action.CALL, ticket.status):
            return ticket, "not_waiting"
        await self._invite(ticket, window_number, registrar_id, clock.now())
        await self.session.commit()
        return ticket, None

    async def invited_for_window(self, window_number: int) -> Ticket | None:
        return await self.tickets.invited_at_window(window_number)

    # ---- Status changes ----
    async def _close_reception(self, ticket: Ticket, now: datetime) -> None:
        entry = await self.logs.find_open(ticket.id)
        if not entry:
            log.warning("No open reception log for ticket %s", ticket.ticket_number)
            return
        try:
            async with self.session.begin_nested():
                entry.completed_at = now
                entry.duration = now - (ticket.started_at or entry.called_at)
        except SQLAlchemyError:
            log.exception("Failed to close reception log %s", entry.id)

    async def update_status(self, ticket_id: int, status: TicketStatus) -> tuple[Ticket | None, str | None]:
        """Generic registrar update.

        A registrar "completed" that arrives after the ticket was registered for the doctor
        is ignored and the ticket is returned unchanged.
        """
        ticket = await self.tickets.get(ticket_id, for_update=True)
        if not ticket:
            return None, "not_found"
        if lifecycle.is_stale_completion(ticket.status, status):
            log.info("Ignoring stale completion of ticket %s (already registered)", ticket.ticket_number)
            return ticket, None
        now = clock.now()
        ticket.status = status
        ticket.completed_at = now if status == TicketStatus.COMPLETED else None
        if status == TicketStatus.IN_PROGRESS and ticket.started_at is None:
            ticket.started_at = now
        if status in lifecycle.VISIT_FINAL:
            await self._close_reception(ticket, now)
        await self.session.commit()
        return ticket, None

    async def start_appointment(self, ticket_id: int) -> tuple[Ticket | None, str | None]:
        ticket = await self.tickets.get(ticket_id, for_update=True)
        if not ticket:
            return None, "not_found"
        if not lifecycle.can(Action.START, ticket.status):
            return ticket, "wrong_status"
        ticket.status = lifecycle.target(Action.START)
        ticket.started_at = clock.now()
        await self.session.commit()
        return ticket, None

    async def complete_appointment(self, ticket_id: int) -> tuple[Ticket | None, str | None]:
        ticket = await self.tickets.get(ticket_id, for_update=True)
        if not ticket:
            return None, "not_found"
        if not lifecycle.can(Action.COMPLETE, ticket.status):
            return ticket, "wrong_status"
        now = clock.now()
        ticket.status = lifecycle.target(Action.COMPLETE)
        ticket.completed_at = now
        await self._close_reception(ticket, now)
        await self.session.commit()
        return ticket, None

    async def confirm_appointment(self, appointment_id: int, ticket_id: int):
        appt = await self.appts.get(appointment_id, for_update=True)
        if not appt:
            return None, "appointment_not_found"
        if appt.ticket_id is not None:
            return None, "already_confirmed"
        ticket = await self.tickets.get(ticket_id, for_update=True)
        if not ticket:
            return None, "ticket_not_found"
        if not lifecycle.can(Action.CONFIRM, ticket.status):
            return None, "wrong_status"
        try:
            appt.ticket_id = ticket.id
            await self.session.flush()
            ticket.status = lifecycle.target(Action.CONFIRM)
            ticket.completed_at = None
            await self.session.commit()
        except SQLAlchemyError:
            # the appointment link must not survive a failed status change
            await self.session.rollback()
            log.exception("Confirming appointment %s with ticket %s failed", appointment_id, ticket_id)
            raise
        return appt, None

    # ---- Reads ----
    async def active_tickets(self):
        return await self.tickets.list_by_statuses([TicketStatus.WAITING, TicketStatus.INVITED])

    async def registrar_tickets(self, registrar_id: int | None, category: str | None = None) -> list[dict]:
        prefixes = await self._prefixes(registrar_id, [category] if category else None)
        rows = await self.tickets.list_for_registrar(REGISTRAR_STATUSES, prefixes)
        out = []
        for ticket, day, start in rows:
            appointment_time = datetime.combine(day, start).strftime("%Y-%m-%d %H:%M:%S") if day and start else None
            out.append({"ticket": ticket, "appointment_time": appointment_time})
        return out

    async def daily_report(self, day: date | None = None) -> list[dict]:
        day = day or clock.now().date()
        rows = await self.tickets.daily_rows(day)
        report = []
        for number, status, called_at, started_at, completed_at, doctor, specialization, cabinet, start in rows:
            began = started_at or called_at
            duration = None
            if completed_at and began:
                secs = int((completed_at - began).total_seconds())
                duration = f"{secs // 3600:02d}:{secs % 3600 // 60:02d}:{secs % 60:02d}"
            report.append({
                "ticket_number": number,
                "doctor_full_name": doctor,
                "doctor_specialization": specialization,
                "cabinet_number": cabinet,
                "appointment_time": start.strftime("%H:%M") if start else None,
                "status": status,
                "called_at": called_at,
                "completed_at": completed_at,
                "duration": duration,
            })
        return report
