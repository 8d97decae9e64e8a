"""Business-process switchboard.

`ProcessGate` mirrors the businessprocess table in memory so the per-request check never
touches the database. It is built once at startup and stored on `app.state`.

Reads and writes share one plain lock, so concurrent reads are serialized too. Every
critical section is a dict access and no lock is held across I/O.
"""
import logging
import threading
from typing import Iterable
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.modules.processes.models import BusinessProcess
from app.modules.processes.repository import ProcessRepository

log = logging.getLogger("processes.gate")

KNOWN_PROCESSES = ("reception", "queue_doctor", "terminal", "registry", "doctor", "database", "schedule")
DISABLED_DETAIL = "This service is temporarily disabled by the administrator."

class ProcessGate:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self._enabled: dict[str, bool] = {}

    async def load(self, seed: Iterable[str] = KNOWN_PROCESSES) -> None:
        async with self._session_factory() as s:
            repo = ProcessRepository(s)
            created = await repo.ensure(seed)
            await s.commit()
            rows = await repo.list_all()
        with self._lock:
            self._enabled = {r.process_name: r.is_enabled for r in rows}
        if created:
            log.info("Seeded business processes: %s", ", ".join(created))
        log.info("Loaded %d business processes", len(rows))

    def is_enabled(self, name: str) -> bool:
        # unknown names are disabled
        with self._lock:
            return self._enabled.get(name, False)

    def any_enabled(self, names: Iterable[str]) -> bool:
        with self._lock:
            return any(self._enabled.get(n, False) for n in names)

    async def update_status(self, name: str, enabled: bool) -> BusinessProcess | None:
        async with self._session_factory() as s:
            obj = await ProcessRepository(s).get(name)
            if not obj:
                return None
            obj.is_enabled = enabled
            await s.commit()
        # memory follows only a committed write
        with self._lock:
            self._enabled[name] = enabled
        log.info("Business process %s %s", name, "enabled" if enabled else "disabled")
        return obj

    async def get_all(self) -> list[BusinessProcess]:
        async with self._session_factory() as s:
            return list(await ProcessRepository(s).list_all())

def get_gate(request: Request) -> ProcessGate:
    return request.app.state.process_gate

def require_process(*names: str):
    """Pass when any of `names` is enabled, else 503."""
    def dep(gate: ProcessGate = Depends(get_gate)):
        if not gate.any_enabled(names):
            raise HTTPException(status_code=503, detail=DISABLED_DETAIL)
    return dep
