import asyncio
import logging
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.core import clock
from app.modules.maintenance.repository import CleanupRepository

log = logging.getLogger("maintenance")

class CleanupService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = CleanupRepository(session)

    async def run(self) -> dict:
        today = clock.now().date()
        tickets = await self.repo.count_completed_tickets()
        appointments = await self.repo.count_lapsed_appointments(today)
        log.info("Cleanup: %d completed tickets, %d lapsed appointments", tickets, appointments)
        try:
            await self.repo.purge(today)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return {"tickets": tickets, "appointments": appointments}

def seconds_until(at: str, now: datetime) -> float:
    """Seconds from `now` to the next occurrence of wall-clock time `at` ("HH:MM")."""
    hour, minute = (int(p) for p in at.split(":"))
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()

async def run_maintenance_timer(session_factory: async_sessionmaker[AsyncSession], at: str = "00:00"):
    log.info("Maintenance timer started; daily run at %s", at)
    try:
        while True:
            await asyncio.sleep(seconds_until(at, clock.now()))
            try:
                async with session_factory() as session:
                    await CleanupService(session).run()
            except Exception:
                log.exception("Daily maintenance failed")
    except asyncio.CancelledError:
        log.info("Maintenance timer cancelled; shutting down")
        raise
