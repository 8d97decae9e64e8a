from fastapi import APIRouter, Depends, HTTPException
from app.core.security import require_api_key, require_scopes
from app.modules.processes.gate import ProcessGate, get_gate
from app.modules.processes.schemas import ProcessOut, ProcessUpdate

router = APIRouter(dependencies=[Depends(require_api_key("internal"))])

@router.get("/processes", response_model=list[ProcessOut], dependencies=[Depends(require_scopes("admin:read"))])
async def list_processes(gate: ProcessGate = Depends(get_gate)):
    return await gate.get_all()

@router.put("/processes/{name}", response_model=ProcessOut, dependencies=[Depends(require_scopes("admin:write"))])
async def update_process(name: str, payload: ProcessUpdate, gate: ProcessGate = Depends(get_gate)):
    obj = await gate.update_status(name, payload.is_enabled)
    if not obj:
        raise HTTPException(status_code=404, detail="Business process not found")
    return obj
