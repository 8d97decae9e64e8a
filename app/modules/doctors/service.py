import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core import clock
from app.modules.doctors.models import Doctor, DoctorStatus
from app.modules.doctors.repository import DoctorRepository
from app.modules.schedules.repository import ScheduleRepository
from app.modules.realtime.broker import Broker
from app.modules.realtime.messages import DoctorStatusEvent

logger = logging.getLogger(__name__)

# action -> (statuses it may start from, resulting status); None means any
STATUS_ACTIONS: dict[str, tuple[set[DoctorStatus] | None, DoctorStatus]] = {
    "activate": (None, DoctorStatus.ACTIVE),
    "deactivate": (None, DoctorStatus.INACTIVE),
    "start_break": ({DoctorStatus.ACTIVE}, DoctorStatus.ON_BREAK),
    "end_break": ({DoctorStatus.ON_BREAK}, DoctorStatus.ACTIVE),
}

def empty_screen(cabinet: int) -> dict:
    return {
        "doctor_name": "",
        "doctor_specialty": "",
        "doctor_status": DoctorStatus.INACTIVE.value,
        "cabinet_number": cabinet,
        "queue": [],
        "message": "No appointments in this cabinet today",
    }

class DoctorService:
    def __init__(self, session: AsyncSession, broker: Broker | None = None):
        self.session = session
        self.broker = broker
        self.doctors = DoctorRepository(session)
        self.slots = ScheduleRepository(session)

    async def list_doctors(self):
        return await self.doctors.list()

    async def screen_state(self, cabinet: int) -> dict:
        """Board state for one cabinet.

        Identity comes from the cabinet's earliest slot today, so the board shows the doctor
        before the shift begins. If the queue query fails the identity is still returned.
        """
        today = clock.now().date()
        first = await self.slots.first_for_cabinet(cabinet, today)
        if first is None:
            return empty_screen(cabinet)
        _, doctor = first
        state = {
            "doctor_name": doctor.full_name,
            "doctor_specialty": doctor.specialization,
            "doctor_status": doctor.status.value,
            "cabinet_number": cabinet,
            "queue": [],
            "message": "",
        }
        try:
            rows = await self.doctors.cabinet_queue(cabinet, today)
        except SQLAlchemyError:
            logger.exception("Queue query failed for cabinet %s", cabinet)
            return state
        state["queue"] = [
            {
                "start_time": start.strftime("%H:%M"),
                "ticket_number": number,
                "patient_full_name": patient,
                "status": status.value,
            }
            for start, number, patient, status in rows
        ]
        return state

    async def change_status(self, doctor_id: int, action: str) -> tuple[Doctor | None, str | None]:
        if action not in STATUS_ACTIONS:
            return None, "unknown_action"
        allowed, result = STATUS_ACTIONS[action]
        doctor = await self.doctors.get(doctor_id, for_update=True)
        if not doctor:
            return None, "doctor_not_found"
        if allowed is not None and doctor.status not in allowed:
            return doctor, "wrong_status"
        doctor.status = result
        await self.session.commit()
        logger.info("Doctor %s is now %s", doctor_id, result.value)
        if self.broker is not None:
            self.broker.publish(DoctorStatusEvent(doctor_id=doctor.id, status=result.value))
        return doctor, None
