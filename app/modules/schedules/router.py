import datetime as dt
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core import clock
from app.core.db import get_session
from app.core.security import require_scopes
from app.modules.processes.gate import require_process
from app.modules.schedules.schemas import ScheduleCreate, ScheduleOut, TodaySnapshot, DoctorScheduleRow
from app.modules.schedules.service import ScheduleService

router = APIRouter(dependencies=[Depends(require_process("schedule"))])

def svc(session: AsyncSession = Depends(get_session)) -> ScheduleService:
    return ScheduleService(session)

@router.post("/schedules", response_model=ScheduleOut, status_code=201, dependencies=[Depends(require_scopes("schedules:write"))])
async def create_slot(payload: ScheduleCreate, service: ScheduleService = Depends(svc)):
    obj, err = await service.create_slot(**payload.model_dump())
    if err == "doctor_not_found": raise HTTPException(404, "Doctor not found")
    if err == "slot_exists": raise HTTPException(409, "Doctor already has a slot starting at this time")
    if err: raise HTTPException(400, "Slot must end after it starts")
    return obj

@router.delete("/schedules/{schedule_id}", status_code=204, dependencies=[Depends(require_scopes("schedules:write"))])
async def delete_slot(schedule_id: int, service: ScheduleService = Depends(svc)):
    ok, err = await service.delete_slot(schedule_id)
    if err == "slot_not_found": raise HTTPException(404, "Schedule slot not found")
    if err: raise HTTPException(409, "Slot is booked; cancel the appointment first")

@router.get("/schedules/today", response_model=TodaySnapshot)
async def today(service: ScheduleService = Depends(svc)):
    return await service.today_snapshot()

@router.get("/schedules/doctors/{doctor_id}", response_model=list[DoctorScheduleRow])
async def doctor_schedule(doctor_id: int, start: dt.date | None = None, end: dt.date | None = None, service: ScheduleService = Depends(svc)):
    start = start or clock.now().date()
    end = end or start
    rows = await service.doctor_schedule(doctor_id, start, end)
    if rows is None:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return rows

@router.get("/cabinets", response_model=list[int])
async def cabinets(service: ScheduleService = Depends(svc)):
    return await service.cabinets()
