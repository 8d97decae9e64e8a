from datetime import date
from typing import Sequence
from sqlalchemy import select, case, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.doctors.models import Doctor
from app.modules.tickets.models import Ticket, TicketStatus
from app.modules.appointments.models import Appointment
from app.modules.schedules.models import Schedule
from app.modules.patients.models import Patient

WALK_IN_NAME = "Walk-in patient"

class DoctorRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, doctor_id: int, *, for_update: bool = False) -> Doctor | None:
        q = select(Doctor).where(Doctor.id == doctor_id)
        if for_update:
            q = q.with_for_update().execution_options(populate_existing=True)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list(self) -> Sequence[Doctor]:
        res = await self.session.execute(select(Doctor).order_by(Doctor.full_name.asc()))
        return res.scalars().all()

    async def cabinet_queue(self, cabinet: int, day: date) -> Sequence:
        """Tickets a cabinet's doctor is serving or about to serve; in-progress first."""
        q = (
            select(
                Schedule.start_time,
                Ticket.ticket_number,
                func.coalesce(Patient.full_name, WALK_IN_NAME),
                Ticket.status,
            )
            .select_from(Ticket)
            .join(Appointment, Appointment.ticket_id == Ticket.id)
            .join(Schedule, Schedule.id == Appointment.schedule_id)
            .outerjoin(Patient, Patient.id == Appointment.patient_id)
            .where(
                Schedule.cabinet == cabinet,
                Schedule.date == day,
                Ticket.status.in_([TicketStatus.IN_PROGRESS, TicketStatus.REGISTERED]),
            )
            .order_by(case((Ticket.status == TicketStatus.IN_PROGRESS, 0), else_=1), Schedule.start_time.asc())
        )
        res = await self.session.execute(q)
        return res.all()
