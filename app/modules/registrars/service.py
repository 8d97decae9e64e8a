from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.registrars.repository import PriorityRepository
from app.modules.catalogs.repository import CatalogRepository

class RegistrarService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.priorities = PriorityRepository(session)
        self.catalog = CatalogRepository(session)

    async def get_priorities(self, registrar_id: int):
        return await self.priorities.services_for(registrar_id)

    async def set_priorities(self, registrar_id: int, service_ids: list[int]):
        known = {s.id for s in await self.catalog.get_many(service_ids)}
        if set(service_ids) - known:
            return None, "unknown_service"
        await self.priorities.replace(registrar_id, service_ids)
        await self.session.commit()
        return await self.priorities.services_for(registrar_id), None
