from pydantic import BaseModel, ConfigDict
from app.modules.doctors.models import DoctorStatus

class DoctorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    specialization: str
    status: DoctorStatus

class QueueEntry(BaseModel):
    start_time: str
    ticket_number: str
    patient_full_name: str
    status: str

class ScreenState(BaseModel):
    doctor_name: str
    doctor_specialty: str
    doctor_status: str
    cabinet_number: int
    queue: list[QueueEntry]
    message: str
