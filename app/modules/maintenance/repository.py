from datetime import date
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.tickets.models import Ticket, ReceptionLog
from app.modules.appointments.models import Appointment
from app.modules.schedules.models import Schedule

def _lapsed(today: date):
    # ticketless appointments whose day has passed: the patient never checked in
    return Appointment.ticket_id.is_(None) & Appointment.schedule_id.in_(select(Schedule.id).where(Schedule.date < today))

def _completed():
    return select(Ticket.id).where(Ticket.completed_at.is_not(None))

class CleanupRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_completed_tickets(self) -> int:
        res = await self.session.execute(select(func.count()).select_from(Ticket).where(Ticket.completed_at.is_not(None)))
        return int(res.scalar_one())

    async def count_lapsed_appointments(self, today: date) -> int:
        res = await self.session.execute(select(func.count()).select_from(Appointment).where(_lapsed(today)))
        return int(res.scalar_one())

    async def purge(self, today: date) -> None:
        """Delete lapsed appointments and completed tickets with the rows hanging off them."""
        await self.session.execute(delete(Appointment).where(_lapsed(today)).execution_options(synchronize_session=False))
        await self.session.execute(delete(Appointment).where(Appointment.ticket_id.in_(_completed())).execution_options(synchronize_session=False))
        await self.session.execute(delete(ReceptionLog).where(ReceptionLog.ticket_id.in_(_completed())).execution_options(synchronize_session=False))
        await self.session.execute(delete(Ticket).where(Ticket.completed_at.is_not(None)).execution_options(synchronize_session=False))
