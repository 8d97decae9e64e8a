from datetime import date, datetime, time, timedelta
from typing import Sequence
from sqlalchemy import select, func, cast, case, and_, Integer
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.tickets.models import Ticket, TicketStatus, ReceptionLog
from app.modules.appointments.models import Appointment
from app.modules.schedules.models import Schedule
from app.modules.doctors.models import Doctor

def _prefix():
    return func.substr(Ticket.ticket_number, 1, 1)

class TicketRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Ticket:
        obj = Ticket(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, ticket_id: int, *, for_update: bool = False) -> Ticket | None:
        q = select(Ticket).where(Ticket.id == ticket_id)
        if for_update:
            # refresh attributes too: the status check that follows must see the locked row
            q = q.with_for_update().execution_options(populate_existing=True)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def max_suffix(self, letter: str) -> int:
        q = select(func.coalesce(func.max(cast(func.substr(Ticket.ticket_number, 2), Integer)), 0)).where(
            _prefix() == letter
        )
        res = await self.session.execute(q)
        return int(res.scalar_one())

    async def next_waiting(self, prefixes: list[str], now: datetime, soon: timedelta) -> Ticket | None:
        """Pick the ticket a registrar should call next.

        Rank 0: linked appointment already started. Rank 1: starts within `soon`.
        Rank 2: everything else. Then earliest slot start (walk-ins last), then oldest ticket.
        """
        today = now.date()
        now_t = now.time()
        soon_t = (now + soon).time()
        if soon_t < now_t:  # window crosses midnight
            soon_t = time.max
        start = Schedule.start_time
        rank = case(
            (and_(start.is_not(None), start < now_t), 0),
            (and_(start.is_not(None), start <= soon_t), 1),
            else_=2,
        )
        q = (
            select(Ticket)
            .outerjoin(Appointment, Appointment.ticket_id == Ticket.id)
            .outerjoin(Schedule, and_(Schedule.id == Appointment.schedule_id, Schedule.date == today))
            .where(Ticket.status == TicketStatus.WAITING)
        )
        if prefixes:
            q = q.where(_prefix().in_(prefixes))
        q = (
            q.order_by(rank, start.asc().nulls_last(), Ticket.created_at.asc(), Ticket.id.asc())
            .limit(1)
            .with_for_update(of=Ticket, skip_locked=True)
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def invited_at_window(self, window_number: int) -> Ticket | None:
        q = (
            select(Ticket)
            .where(Ticket.status == TicketStatus.INVITED, Ticket.window_number == window_number)
            .order_by(Ticket.called_at.desc())
            .limit(1)
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_by_statuses(self, statuses: list[TicketStatus]) -> Sequence[Ticket]:
        q = select(Ticket).where(Ticket.status.in_(statuses)).order_by(Ticket.created_at.asc(), Ticket.id.asc())
        res = await self.session.execute(q)
        return res.scalars().all()

    async def list_for_registrar(self, statuses: list[TicketStatus], prefixes: list[str]) -> list[tuple[Ticket, date | None, time | None]]:
        q = (
            select(Ticket, Schedule.date, Schedule.start_time)
            .outerjoin(Appointment, Appointment.ticket_id == Ticket.id)
            .outerjoin(Schedule, Schedule.id == Appointment.schedule_id)
            .where(Ticket.status.in_(statuses))
        )
        if prefixes:
            q = q.where(_prefix().in_(prefixes))
        q = q.order_by(Ticket.created_at.desc(), Ticket.id.desc())
        res = await self.session.execute(q)
        return [tuple(r) for r in res.all()]

    async def daily_rows(self, day: date) -> list:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        q = (
            select(
                Ticket.ticket_number, Ticket.status, Ticket.called_at, Ticket.started_at, Ticket.completed_at,
                Doctor.full_name, Doctor.specialization, Schedule.cabinet, Schedule.start_time,
            )
            .outerjoin(Appointment, Appointment.ticket_id == Ticket.id)
            .outerjoin(Schedule, Schedule.id == Appointment.schedule_id)
            .outerjoin(Doctor, Doctor.id == Schedule.doctor_id)
            .where(Ticket.created_at >= start, Ticket.created_at < end)
            .order_by(Ticket.created_at.asc(), Ticket.id.asc())
        )
        res = await self.session.execute(q)
        return res.all()

class ReceptionLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> ReceptionLog:
        obj = ReceptionLog(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def find_open(self, ticket_id: int) -> ReceptionLog | None:
        q = (
            select(ReceptionLog)
            .where(ReceptionLog.ticket_id == ticket_id, ReceptionLog.completed_at.is_(None))
            .order_by(ReceptionLog.called_at.desc())
            .limit(1)
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_for_ticket(self, ticket_id: int) -> Sequence[ReceptionLog]:
        q = select(ReceptionLog).where(ReceptionLog.ticket_id == ticket_id).order_by(ReceptionLog.called_at.asc())
        res = await self.session.execute(q)
        return res.scalars().all()
