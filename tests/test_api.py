import httpx
import pytest

from app.core.db import get_session
from app.main import app as application
from app.modules.processes.gate import ProcessGate
from app.modules.realtime.broker import Broker


@pytest.fixture
async def client(session_factory, services):
    async def override_session():
        async with session_factory() as s:
            yield s

    gate = ProcessGate(session_factory)
    await gate.load()
    application.state.process_gate = gate
    application.state.broker = Broker()
    application.dependency_overrides[get_session] = override_session
    transport = httpx.ASGITransport(app=application)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    application.dependency_overrides.clear()


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.json() == {"status": "ok"}


async def test_visit_over_http(client):
    resp = await client.post("/api/tickets", json={"service_id": "make_appointment"})
    assert resp.status_code == 201
    ticket = resp.json()
    assert ticket["ticket_number"] == "A001"
    assert ticket["status"] == "waiting"

    resp = await client.post("/api/registrar/call-next", json={"window_number": 3})
    assert resp.status_code == 200
    assert resp.json()["status"] == "invited"
    assert resp.json()["window_number"] == 3

    resp = await client.get("/api/registrar/windows/3/ticket")
    assert resp.json()["id"] == ticket["id"]

    resp = await client.post(f"/api/doctor/tickets/{ticket['id']}/start")
    assert resp.status_code == 400
    assert "A001" in resp.json()["detail"]

    resp = await client.patch(f"/api/registrar/tickets/{ticket['id']}/status", json={"status": "registered"})
    assert resp.json()["status"] == "registered"

    resp = await client.post(f"/api/doctor/tickets/{ticket['id']}/start")
    assert resp.json()["status"] == "in_progress"
    resp = await client.post(f"/api/doctor/tickets/{ticket['id']}/complete")
    assert resp.json()["status"] == "completed"

    resp = await client.get("/api/registrar/windows/3/ticket")
    assert resp.status_code == 404


async def test_error_mapping(client):
    resp = await client.post("/api/tickets", json={"service_id": "nope"})
    assert resp.status_code == 400

    resp = await client.post("/api/registrar/call-next", json={"window_number": 1})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Queue is empty"

    resp = await client.post("/api/registrar/call-next", json={"window_number": 0})
    assert resp.status_code == 422


async def test_disabled_process_blocks_surface(client):
    resp = await client.put("/api/admin/processes/terminal", json={"is_enabled": False})
    assert resp.status_code == 200
    assert resp.json() == {"process_name": "terminal", "is_enabled": False}

    resp = await client.post("/api/tickets", json={"service_id": "make_appointment"})
    assert resp.status_code == 503

    resp = await client.get("/api/admin/processes")
    switches = {p["process_name"]: p["is_enabled"] for p in resp.json()}
    assert switches["terminal"] is False
    assert switches["registry"] is True

    resp = await client.put("/api/admin/processes/unknown", json={"is_enabled": True})
    assert resp.status_code == 404


async def test_registrar_priorities(client, services):
    c_id = services["analysis_results"].id
    resp = await client.put("/api/registrar/priorities", json={"service_ids": [c_id]})
    assert resp.status_code == 200
    assert [s["letter"] for s in resp.json()["services"]] == ["C"]

    resp = await client.put("/api/registrar/priorities", json={"service_ids": [9999]})
    assert resp.status_code == 400

    await client.post("/api/tickets", json={"service_id": "make_appointment"})
    await client.post("/api/tickets", json={"service_id": "analysis_results"})
    resp = await client.post("/api/registrar/call-next", json={"window_number": 2})
    assert resp.json()["ticket_number"] == "C001"
