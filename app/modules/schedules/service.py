import logging
from datetime import date, time
from sqlalchemy.ext.asyncio import AsyncSession
from app.core import clock
from app.modules.schedules.models import Schedule
from app.modules.schedules.repository import ScheduleRepository
from app.modules.doctors.repository import DoctorRepository

logger = logging.getLogger(__name__)

DEFAULT_DAY_START = "09:00:00"
DEFAULT_DAY_END = "18:00:00"

def _hms(t: time) -> str:
    return t.strftime("%H:%M:%S")

class ScheduleService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.slots = ScheduleRepository(session)
        self.doctors = DoctorRepository(session)

    async def create_slot(self, *, doctor_id: int, date: date, start_time: time, end_time: time, cabinet: int | None = None) -> tuple[Schedule | None, str | None]:
        if end_time <= start_time:
            return None, "invalid_interval"
        if not await self.doctors.get(doctor_id):
            return None, "doctor_not_found"
        if await self.slots.exists(doctor_id, date, start_time):
            return None, "slot_exists"
        obj = await self.slots.create(doctor_id=doctor_id, date=date, start_time=start_time, end_time=end_time, cabinet=cabinet, is_available=True)
        await self.session.commit()
        return obj, None

    async def delete_slot(self, schedule_id: int) -> tuple[bool, str | None]:
        slot = await self.slots.get(schedule_id, for_update=True)
        if not slot:
            return False, "slot_not_found"
        if not slot.is_available:
            return False, "slot_taken"
        await self.slots.delete(slot)
        await self.session.commit()
        return True, None

    async def today_snapshot(self) -> dict:
        """Board payload: the day's time window plus every doctor's slots in start order."""
        today = clock.now().date()
        lo, hi = await self.slots.day_bounds(today)
        doctors: dict[int, dict] = {}
        for slot, doctor in await self.slots.list_for_day(today):
            entry = doctors.setdefault(doctor.id, {
                "id": doctor.id,
                "full_name": doctor.full_name,
                "specialization": doctor.specialization,
                "slots": [],
            })
            entry["slots"].append({
                "id": slot.id,
                "start_time": _hms(slot.start_time),
                "end_time": _hms(slot.end_time),
                "is_available": slot.is_available,
                "cabinet": slot.cabinet,
            })
        return {
            "date": today.isoformat(),
            "min_start_time": _hms(lo) if lo else DEFAULT_DAY_START,
            "max_end_time": _hms(hi) if hi else DEFAULT_DAY_END,
            "doctors": list(doctors.values()),
        }

    async def doctor_schedule(self, doctor_id: int, start: date, end: date) -> list[dict] | None:
        if not await self.doctors.get(doctor_id):
            return None
        out = []
        for slot, appt, patient in await self.slots.list_for_doctor(doctor_id, start, end):
            out.append({
                "id": slot.id,
                "date": slot.date,
                "start_time": slot.start_time,
                "end_time": slot.end_time,
                "is_available": slot.is_available,
                "cabinet": slot.cabinet,
                "appointment_id": appt.id if appt else None,
                "ticket_id": appt.ticket_id if appt else None,
                "patient_id": patient.id if patient else None,
                "patient_full_name": patient.full_name if patient else None,
            })
        return out

    async def cabinets(self) -> list[int]:
        return await self.slots.cabinets()
