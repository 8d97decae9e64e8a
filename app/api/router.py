from fastapi import APIRouter
from app.modules.catalogs.router import router as catalogs_router
from app.modules.tickets.router import router as tickets_router
from app.modules.registrars.router import router as registrars_router
from app.modules.doctors.router import router as doctors_router
from app.modules.schedules.router import router as schedules_router
from app.modules.appointments.router import router as appointments_router
from app.modules.processes.router import router as processes_router
from app.modules.realtime.router import router as realtime_router

api_router = APIRouter()
api_router.include_router(catalogs_router, tags=["catalogs"])
api_router.include_router(tickets_router, tags=["tickets"])
api_router.include_router(registrars_router, tags=["registrars"])
api_router.include_router(doctors_router, tags=["doctors"])
api_router.include_router(schedules_router, tags=["schedules"])
api_router.include_router(appointments_router, tags=["appointments"])
api_router.include_router(processes_router, prefix="/admin", tags=["admin"])
api_router.include_router(realtime_router, tags=["realtime"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
