from pydantic import BaseModel
from app.modules.catalogs.schemas import ServiceOut

class PrioritiesUpdate(BaseModel):
    service_ids: list[int]

class PrioritiesOut(BaseModel):
    registrar_id: int
    services: list[ServiceOut]
