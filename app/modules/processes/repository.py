from typing import Iterable, Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.modules.processes.models import BusinessProcess

class ProcessRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> Sequence[BusinessProcess]:
        res = await self.session.execute(select(BusinessProcess).order_by(BusinessProcess.process_name.asc()))
        return res.scalars().all()

    async def get(self, name: str) -> BusinessProcess | None:
        return await self.session.get(BusinessProcess, name)

    async def ensure(self, names: Iterable[str]) -> list[str]:
        """Insert any missing process as enabled; returns the names created."""
        existing = {p.process_name for p in await self.list_all()}
        created = [n for n in names if n not in existing]
        for name in created:
            self.session.add(BusinessProcess(process_name=name, is_enabled=True))
        await self.session.flush()
        return created
