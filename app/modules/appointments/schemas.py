from datetime import date, datetime, time
from pydantic import BaseModel, ConfigDict

class AppointmentCreate(BaseModel):
    schedule_id: int
    patient_id: int | None = None

class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    schedule_id: int
    patient_id: int | None
    ticket_id: int | None
    created_at: datetime

class PatientAppointmentOut(BaseModel):
    id: int
    schedule_id: int
    ticket_id: int | None
    date: date
    start_time: time
    end_time: time
    cabinet: int | None
    doctor_id: int
    doctor_full_name: str
    doctor_specialization: str
