from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from app.core.db import SessionLocal
from app.modules.processes.gate import require_process
from app.modules.doctors.service import DoctorService
from app.modules.schedules.service import ScheduleService
from app.modules.realtime.broker import Broker
from app.modules.realtime.streams import reception_stream, doctor_stream, schedule_stream

router = APIRouter()

SSE_HEADERS = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}

def get_broker(request: Request) -> Broker:
    return request.app.state.broker

@router.get("/realtime/tickets", dependencies=[Depends(require_process("reception"))])
async def ticket_updates(broker: Broker = Depends(get_broker)):
    return StreamingResponse(reception_stream(broker), media_type="text/event-stream", headers=SSE_HEADERS)

@router.get("/doctor/screen-updates/{cabinet}", dependencies=[Depends(require_process("queue_doctor"))])
async def screen_updates(cabinet: int, broker: Broker = Depends(get_broker)):
    # every recomputation gets its own short session; the stream may live for hours
    async def snapshot() -> dict:
        async with SessionLocal() as s:
            return await DoctorService(s).screen_state(cabinet)

    return StreamingResponse(doctor_stream(broker, snapshot), media_type="text/event-stream", headers=SSE_HEADERS)

@router.get("/schedules/today/updates", dependencies=[Depends(require_process("schedule"))])
async def schedule_updates(broker: Broker = Depends(get_broker)):
    async def snapshot() -> dict:
        async with SessionLocal() as s:
            return await ScheduleService(s).today_snapshot()

    return StreamingResponse(schedule_stream(broker, snapshot), media_type="text/event-stream", headers=SSE_HEADERS)
