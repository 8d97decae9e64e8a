from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.catalogs.models import Service

class CatalogRepository:
    def __init__(self, s: AsyncSession): self.s = s

    async def list_services(self) -> Sequence[Service]:
        r = await self.s.execute(select(Service).order_by(Service.letter.asc(), Service.id.asc()))
        return r.scalars().all()

    async def get_by_service_id(self, service_id: str) -> Service | None:
        r = await self.s.execute(select(Service).where(Service.service_id == service_id))
        return r.scalar_one_or_none()

    async def get_many(self, ids: list[int]) -> Sequence[Service]:
        if not ids: return []
        r = await self.s.execute(select(Service).where(Service.id.in_(ids)))
        return r.scalars().all()
