from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, require_api_key, require_scopes, Principal
from app.modules.processes.gate import require_process
from app.modules.tickets.models import Ticket
from app.modules.tickets.schemas import (
    TicketCreate, CheckInRequest, CallNextRequest, CallSpecificRequest, StatusUpdate,
    ConfirmRequest, TicketOut, RegistrarTicketOut, DailyReportRow,
)
from app.modules.tickets.service import TicketService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session)) -> TicketService:
    return TicketService(session)

_ERRORS = {
    "unknown_service": (400, "Unknown service"),
    "invalid_phone": (400, "Phone number must contain digits"),
    "queue_empty": (404, "Queue is empty"),
    "not_found": (404, "Ticket not found"),
    "ticket_not_found": (404, "Ticket not found"),
    "appointment_not_found": (404, "Appointment not found"),
    "patient_not_found": (404, "No patient with this phone number"),
    "no_upcoming_appointment": (404, "No upcoming appointment today"),
    "already_confirmed": (409, "Appointment already has a ticket"),
    "not_waiting": (400, "Ticket is not waiting"),
    "wrong_status": (400, "Ticket status does not allow this action"),
}

def _fail(err: str, ticket: Ticket | None = None):
    code, detail = _ERRORS.get(err, (400, err))
    if ticket is not None:
        detail = f"{detail}: ticket {ticket.ticket_number} is '{ticket.status.value}'"
    raise HTTPException(status_code=code, detail=detail)

# ---- Terminal ----

@router.post("/tickets", response_model=TicketOut, status_code=201,
             dependencies=[Depends(require_process("terminal")), Depends(require_api_key("external"))])
async def create_ticket(payload: TicketCreate, service: TicketService = Depends(svc)):
    obj, err = await service.create_ticket(payload.service_id)
    if err: _fail(err)
    return obj

@router.post("/tickets/checkin", response_model=TicketOut, status_code=201,
             dependencies=[Depends(require_process("terminal")), Depends(require_api_key("external"))])
async def check_in(payload: CheckInRequest, service: TicketService = Depends(svc)):
    obj, err = await service.check_in_by_phone(payload.phone)
    if err: _fail(err)
    return obj

@router.get("/tickets/active", response_model=list[TicketOut], dependencies=[Depends(require_process("reception", "registry"))])
async def active_tickets(service: TicketService = Depends(svc)):
    return await service.active_tickets()

# ---- Registrar ----

registrar = [Depends(require_process("registry")), Depends(require_scopes("queue:call"))]

@router.post("/registrar/call-next", response_model=TicketOut, dependencies=registrar)
async def call_next(payload: CallNextRequest, principal: Principal = Depends(get_principal), service: TicketService = Depends(svc)):
    obj, err = await service.call_next(payload.window_number, principal.user_id, payload.categories)
    if err: _fail(err)
    return obj

@router.post("/registrar/tickets/{ticket_id}/call", response_model=TicketOut, dependencies=registrar)
async def call_specific(ticket_id: int, payload: CallSpecificRequest, principal: Principal = Depends(get_principal), service: TicketService = Depends(svc)):
    obj, err = await service.call_specific(ticket_id, payload.window_number, principal.user_id)
    if err: _fail(err, obj)
    return obj

@router.patch("/registrar/tickets/{ticket_id}/status", response_model=TicketOut, dependencies=registrar)
async def update_status(ticket_id: int, payload: StatusUpdate, service: TicketService = Depends(svc)):
    obj, err = await service.update_status(ticket_id, payload.status)
    if err: _fail(err)
    return obj

@router.get("/registrar/tickets", response_model=list[RegistrarTicketOut], dependencies=registrar)
async def registrar_tickets(category: str | None = None, principal: Principal = Depends(get_principal), service: TicketService = Depends(svc)):
    return await service.registrar_tickets(principal.user_id, category)

@router.get("/registrar/windows/{window_number}/ticket", response_model=TicketOut, dependencies=registrar)
async def invited_for_window(window_number: int, service: TicketService = Depends(svc)):
    obj = await service.invited_for_window(window_number)
    if not obj:
        raise HTTPException(status_code=404, detail="No active ticket for this window")
    return obj

@router.post("/registrar/appointments/{appointment_id}/confirm", dependencies=registrar)
async def confirm_appointment(appointment_id: int, payload: ConfirmRequest, service: TicketService = Depends(svc)):
    appt, err = await service.confirm_appointment(appointment_id, payload.ticket_id)
    if err: _fail(err)
    return {"appointment_id": appt.id, "ticket_id": appt.ticket_id, "schedule_id": appt.schedule_id}

@router.get("/registrar/reports/daily", response_model=list[DailyReportRow], dependencies=registrar)
async def daily_report(day: date | None = None, service: TicketService = Depends(svc)):
    return await service.daily_report(day)

# ---- Doctor ----

doctor = [Depends(require_process("doctor")), Depends(require_scopes("doctor:write"))]

@router.post("/doctor/tickets/{ticket_id}/start", response_model=TicketOut, dependencies=doctor)
async def start_appointment(ticket_id: int, service: TicketService = Depends(svc)):
    obj, err = await service.start_appointment(ticket_id)
    if err: _fail(err, obj)
    return obj

@router.post("/doctor/tickets/{ticket_id}/complete", response_model=TicketOut, dependencies=doctor)
async def complete_appointment(ticket_id: int, service: TicketService = Depends(svc)):
    obj, err = await service.complete_appointment(ticket_id)
    if err: _fail(err, obj)
    return obj
