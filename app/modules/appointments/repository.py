from datetime import date
from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.appointments.models import Appointment
from app.modules.schedules.models import Schedule
from app.modules.doctors.models import Doctor

class AppointmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Appointment:
        obj = Appointment(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, appointment_id: int, *, for_update: bool = False) -> Appointment | None:
        q = select(Appointment).where(Appointment.id == appointment_id)
        if for_update:
            q = q.with_for_update()
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def delete(self, obj: Appointment) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    async def next_unticketed_for_patient(self, patient_id: int, day: date) -> Appointment | None:
        q = (
            select(Appointment)
            .join(Schedule, Schedule.id == Appointment.schedule_id)
            .where(Appointment.patient_id == patient_id, Appointment.ticket_id.is_(None), Schedule.date == day)
            .order_by(Schedule.start_time.asc())
            .limit(1)
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_for_patient(self, patient_id: int) -> Sequence:
        q = (
            select(Appointment, Schedule, Doctor)
            .join(Schedule, Schedule.id == Appointment.schedule_id)
            .join(Doctor, Doctor.id == Schedule.doctor_id)
            .where(Appointment.patient_id == patient_id)
            .order_by(Schedule.date.asc(), Schedule.start_time.asc())
        )
        res = await self.session.execute(q)
        return res.all()
