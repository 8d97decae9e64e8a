from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import require_scopes
from app.modules.processes.gate import require_process
from app.modules.doctors.schemas import DoctorOut, ScreenState
from app.modules.doctors.service import DoctorService

router = APIRouter()

def svc(request: Request, session: AsyncSession = Depends(get_session)) -> DoctorService:
    return DoctorService(session, request.app.state.broker)

@router.get("/doctors", response_model=list[DoctorOut], dependencies=[Depends(require_process("doctor", "schedule"))])
async def list_doctors(service: DoctorService = Depends(svc)):
    return await service.list_doctors()

@router.get("/doctor/screen/{cabinet}", response_model=ScreenState, dependencies=[Depends(require_process("queue_doctor"))])
async def screen(cabinet: int, service: DoctorService = Depends(svc)):
    return await service.screen_state(cabinet)

@router.post("/doctors/{doctor_id}/status/{action}", response_model=DoctorOut,
             dependencies=[Depends(require_process("doctor")), Depends(require_scopes("doctor:write"))])
async def change_status(doctor_id: int, action: str, service: DoctorService = Depends(svc)):
    doctor, err = await service.change_status(doctor_id, action)
    if err == "unknown_action": raise HTTPException(400, f"Unknown action '{action}'")
    if err == "doctor_not_found": raise HTTPException(404, "Doctor not found")
    if err: raise HTTPException(400, f"Cannot {action} while doctor is '{doctor.status.value}'")
    return doctor
