from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from app.modules.tickets.models import TicketStatus

class TicketCreate(BaseModel):
    service_id: str = Field(..., min_length=1)

class CheckInRequest(BaseModel):
    phone: str = Field(..., min_length=1)

class CallNextRequest(BaseModel):
    window_number: int = Field(..., ge=1)
    categories: list[str] | None = None  # letter prefixes; registrar priorities when omitted

class CallSpecificRequest(BaseModel):
    window_number: int = Field(..., ge=1)

class StatusUpdate(BaseModel):
    status: TicketStatus

class ConfirmRequest(BaseModel):
    ticket_id: int

class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str
    status: TicketStatus
    service_type: str | None
    window_number: int | None
    created_at: datetime
    called_at: datetime | None
    started_at: datetime | None
    completed_at: datetime | None

class RegistrarTicketOut(BaseModel):
    ticket: TicketOut
    appointment_time: str | None

class DailyReportRow(BaseModel):
    ticket_number: str
    doctor_full_name: str | None
    doctor_specialization: str | None
    cabinet_number: int | None
    appointment_time: str | None
    status: TicketStatus
    called_at: datetime | None
    completed_at: datetime | None
    duration: str | None
