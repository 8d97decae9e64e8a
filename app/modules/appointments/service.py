import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core import clock
from app.modules.appointments.models import Appointment
from app.modules.appointments.repository import AppointmentRepository
from app.modules.schedules.repository import ScheduleRepository
from app.modules.patients.repository import PatientRepository

logger = logging.getLogger(__name__)

class AppointmentService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.appts = AppointmentRepository(session)
        self.slots = ScheduleRepository(session)
        self.patients = PatientRepository(session)

    async def create(self, schedule_id: int, patient_id: int | None) -> tuple[Appointment | None, str | None]:
        # slot row stays locked until the appointment and the availability flip commit together
        slot = await self.slots.get(schedule_id, for_update=True)
        if not slot:
            return None, "slot_not_found"
        if not slot.is_available:
            await self.session.rollback()
            return None, "slot_taken"
        if patient_id is not None and not await self.patients.get(patient_id):
            await self.session.rollback()
            return None, "patient_not_found"
        appt = await self.appts.create(schedule_id=slot.id, patient_id=patient_id, created_at=clock.now())
        slot.is_available = False
        await self.session.commit()
        logger.info("Booked slot %s for patient %s (appointment %s)", slot.id, patient_id, appt.id)
        return appt, None

    async def delete(self, appointment_id: int) -> bool:
        appt = await self.appts.get(appointment_id, for_update=True)
        if not appt:
            return False
        slot = await self.slots.get(appt.schedule_id, for_update=True)
        await self.appts.delete(appt)
        if slot:
            slot.is_available = True
        await self.session.commit()
        logger.info("Cancelled appointment %s; slot %s is free again", appointment_id, appt.schedule_id)
        return True

    async def for_patient(self, patient_id: int) -> list[dict]:
        rows = await self.appts.list_for_patient(patient_id)
        return [
            {
                "id": appt.id,
                "schedule_id": slot.id,
                "ticket_id": appt.ticket_id,
                "date": slot.date,
                "start_time": slot.start_time,
                "end_time": slot.end_time,
                "cabinet": slot.cabinet,
                "doctor_id": doctor.id,
                "doctor_full_name": doctor.full_name,
                "doctor_specialization": doctor.specialization,
            }
            for appt, slot, doctor in rows
        ]
