from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.core.security import get_principal, require_scopes, Principal
from app.modules.processes.gate import require_process
from app.modules.registrars.schemas import PrioritiesUpdate, PrioritiesOut
from app.modules.registrars.service import RegistrarService

router = APIRouter(dependencies=[Depends(require_process("registry")), Depends(require_scopes("queue:call"))])

def svc(session: AsyncSession = Depends(get_session)) -> RegistrarService:
    return RegistrarService(session)

@router.get("/registrar/priorities", response_model=PrioritiesOut)
async def get_priorities(principal: Principal = Depends(get_principal), service: RegistrarService = Depends(svc)):
    services = await service.get_priorities(principal.user_id)
    return {"registrar_id": principal.user_id, "services": services}

@router.put("/registrar/priorities", response_model=PrioritiesOut)
async def set_priorities(payload: PrioritiesUpdate, principal: Principal = Depends(get_principal), service: RegistrarService = Depends(svc)):
    services, err = await service.set_priorities(principal.user_id, payload.service_ids)
    if err:
        raise HTTPException(status_code=400, detail="Unknown service in priority list")
    return {"registrar_id": principal.user_id, "services": services}
