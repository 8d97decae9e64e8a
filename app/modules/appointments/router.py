from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import require_scopes
from app.modules.processes.gate import require_process
from app.modules.appointments.schemas import AppointmentCreate, AppointmentOut, PatientAppointmentOut
from app.modules.appointments.service import AppointmentService

router = APIRouter(dependencies=[Depends(require_process("registry", "schedule"))])

def svc(session: AsyncSession = Depends(get_session)) -> AppointmentService:
    return AppointmentService(session)

@router.post("/appointments", response_model=AppointmentOut, status_code=201, dependencies=[Depends(require_scopes("appointments:write"))])
async def create_appointment(payload: AppointmentCreate, service: AppointmentService = Depends(svc)):
    appt, err = await service.create(payload.schedule_id, payload.patient_id)
    if err == "slot_not_found": raise HTTPException(404, "Schedule slot not found")
    if err == "patient_not_found": raise HTTPException(404, "Patient not found")
    if err == "slot_taken": raise HTTPException(409, "Schedule slot is already booked")
    return appt

@router.delete("/appointments/{appointment_id}", status_code=204, dependencies=[Depends(require_scopes("appointments:write"))])
async def delete_appointment(appointment_id: int, service: AppointmentService = Depends(svc)):
    if not await service.delete(appointment_id):
        raise HTTPException(status_code=404, detail="Appointment not found")

@router.get("/patients/{patient_id}/appointments", response_model=list[PatientAppointmentOut], dependencies=[Depends(require_scopes("appointments:read"))])
async def patient_appointments(patient_id: int, service: AppointmentService = Depends(svc)):
    return await service.for_patient(patient_id)
