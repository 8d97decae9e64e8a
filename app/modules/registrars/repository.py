from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from app.modules.registrars.models import RegistrarPriority
from app.modules.catalogs.models import Service

class PriorityRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def services_for(self, registrar_id: int) -> Sequence[Service]:
        q = (
            select(Service)
            .join(RegistrarPriority, RegistrarPriority.service_id == Service.id)
            .where(RegistrarPriority.registrar_id == registrar_id)
            .order_by(Service.letter.asc())
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    async def letters_for(self, registrar_id: int) -> list[str]:
        return [s.letter for s in await self.services_for(registrar_id)]

    async def replace(self, registrar_id: int, service_ids: list[int]) -> None:
        await self.session.execute(delete(RegistrarPriority).where(RegistrarPriority.registrar_id == registrar_id))
        for sid in dict.fromkeys(service_ids):
            self.session.add(RegistrarPriority(registrar_id=registrar_id, service_id=sid))
        await self.session.flush()
