import httpx
import pytest
from fastapi import Depends, FastAPI
from sqlalchemy import select

from app.modules.processes.gate import DISABLED_DETAIL, KNOWN_PROCESSES, ProcessGate, require_process
from app.modules.processes.models import BusinessProcess


@pytest.fixture
async def gate(session_factory):
    obj = ProcessGate(session_factory)
    await obj.load()
    return obj


async def test_load_seeds_known_processes_enabled(gate):
    rows = await gate.get_all()
    assert {r.process_name for r in rows} == set(KNOWN_PROCESSES)
    assert all(gate.is_enabled(name) for name in KNOWN_PROCESSES)


async def test_load_keeps_stored_switches(session_factory):
    async with session_factory() as s:
        s.add(BusinessProcess(process_name="terminal", is_enabled=False))
        await s.commit()

    gate = ProcessGate(session_factory)
    await gate.load()
    assert gate.is_enabled("terminal") is False
    assert gate.is_enabled("registry") is True


async def test_update_is_visible_immediately_and_persisted(gate, session_factory):
    obj = await gate.update_status("registry", False)
    assert obj.is_enabled is False
    assert gate.is_enabled("registry") is False

    async with session_factory() as s:
        stored = (await s.execute(
            select(BusinessProcess.is_enabled).where(BusinessProcess.process_name == "registry")
        )).scalar_one()
    assert stored is False

    # a fresh cache built from the store agrees
    reloaded = ProcessGate(session_factory)
    await reloaded.load()
    assert reloaded.is_enabled("registry") is False


async def test_unknown_process_is_closed(gate):
    assert gate.is_enabled("no_such_process") is False
    assert await gate.update_status("no_such_process", True) is None
    assert gate.is_enabled("no_such_process") is False


async def test_any_enabled(gate):
    await gate.update_status("reception", False)
    assert gate.any_enabled(["reception", "registry"]) is True
    await gate.update_status("registry", False)
    assert gate.any_enabled(["reception", "registry"]) is False


async def test_require_process_dependency(gate):
    app = FastAPI()
    app.state.process_gate = gate

    @app.get("/kiosk", dependencies=[Depends(require_process("terminal"))])
    async def kiosk():
        return {"ok": True}

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        assert (await client.get("/kiosk")).status_code == 200

        await gate.update_status("terminal", False)
        resp = await client.get("/kiosk")
        assert resp.status_code == 503
        assert resp.json() == {"detail": DISABLED_DETAIL}
