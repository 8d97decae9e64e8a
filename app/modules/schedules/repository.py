from datetime import date, time
from typing import Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.schedules.models import Schedule
from app.modules.doctors.models import Doctor
from app.modules.appointments.models import Appointment
from app.modules.patients.models import Patient

class ScheduleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **data) -> Schedule:
        obj = Schedule(**data)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def get(self, schedule_id: int, *, for_update: bool = False) -> Schedule | None:
        q = select(Schedule).where(Schedule.id == schedule_id)
        if for_update:
            q = q.with_for_update()
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def exists(self, doctor_id: int, day: date, start_time: time) -> bool:
        q = select(Schedule.id).where(Schedule.doctor_id == doctor_id, Schedule.date == day, Schedule.start_time == start_time)
        res = await self.session.execute(q)
        return res.first() is not None

    async def delete(self, obj: Schedule) -> None:
        await self.session.delete(obj)
        await self.session.flush()

    async def day_bounds(self, day: date) -> tuple[time | None, time | None]:
        res = await self.session.execute(
            select(func.min(Schedule.start_time), func.max(Schedule.end_time)).where(Schedule.date == day)
        )
        lo, hi = res.one()
        return lo, hi

    async def list_for_day(self, day: date) -> Sequence:
        q = (
            select(Schedule, Doctor)
            .join(Doctor, Doctor.id == Schedule.doctor_id)
            .where(Schedule.date == day)
            .order_by(Doctor.id.asc(), Schedule.start_time.asc())
        )
        res = await self.session.execute(q)
        return res.all()

    async def first_for_cabinet(self, cabinet: int, day: date):
        q = (
            select(Schedule, Doctor)
            .join(Doctor, Doctor.id == Schedule.doctor_id)
            .where(Schedule.cabinet == cabinet, Schedule.date == day)
            .order_by(Schedule.start_time.asc())
            .limit(1)
        )
        res = await self.session.execute(q)
        return res.first()

    async def list_for_doctor(self, doctor_id: int, start: date, end: date) -> Sequence:
        q = (
            select(Schedule, Appointment, Patient)
            .outerjoin(Appointment, Appointment.schedule_id == Schedule.id)
            .outerjoin(Patient, Patient.id == Appointment.patient_id)
            .where(Schedule.doctor_id == doctor_id, Schedule.date >= start, Schedule.date <= end)
            .order_by(Schedule.date.asc(), Schedule.start_time.asc())
        )
        res = await self.session.execute(q)
        return res.all()

    async def cabinets(self) -> list[int]:
        q = select(Schedule.cabinet).where(Schedule.cabinet.is_not(None)).distinct().order_by(Schedule.cabinet.asc())
        res = await self.session.execute(q)
        return list(res.scalars().all())
