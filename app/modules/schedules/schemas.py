import datetime as dt
from pydantic import BaseModel, ConfigDict, Field

class ScheduleCreate(BaseModel):
    doctor_id: int
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    cabinet: int | None = Field(default=None, ge=1)

class ScheduleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: int
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    is_available: bool
    cabinet: int | None

class SlotOut(BaseModel):
    id: int
    start_time: str
    end_time: str
    is_available: bool
    cabinet: int | None

class DoctorSlotsOut(BaseModel):
    id: int
    full_name: str
    specialization: str
    slots: list[SlotOut]

class TodaySnapshot(BaseModel):
    date: str
    min_start_time: str
    max_end_time: str
    doctors: list[DoctorSlotsOut]

class DoctorScheduleRow(BaseModel):
    id: int
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    is_available: bool
    cabinet: int | None
    appointment_id: int | None
    ticket_id: int | None
    patient_id: int | None
    patient_full_name: str | None
