import os

# settings are read at import time; point them at sqlite before the app is imported
os.environ.setdefault("POSTGRES_DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CHANGE_FEED_PROVIDER", "none")
os.environ.setdefault("ENV", "local")

from datetime import date, datetime, time

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core import clock
from app.core.base import Base
from app.modules.catalogs.models import Service
from app.modules.doctors.models import Doctor, DoctorStatus
from app.modules.schedules.models import Schedule
from app.modules.patients.models import Patient
from app.modules.appointments.models import Appointment

NOW = datetime(2024, 3, 11, 10, 0, 0)
TODAY = NOW.date()

@pytest.fixture(autouse=True)
def fixed_clock(monkeypatch):
    state = {"now": NOW}
    monkeypatch.setattr(clock, "now", lambda: state["now"])
    return state

@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()

@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s

@pytest.fixture
async def services(session):
    rows = [
        Service(service_id="make_appointment", name="Make an appointment", letter="A"),
        Service(service_id="confirm_appointment", name="Confirm an appointment", letter="B"),
        Service(service_id="analysis_results", name="Analysis results", letter="C"),
    ]
    session.add_all(rows)
    await session.commit()
    return {s.service_id: s for s in rows}

@pytest.fixture
async def doctor(session):
    obj = Doctor(full_name="Anna Petrova", specialization="Therapist", status=DoctorStatus.ACTIVE)
    session.add(obj)
    await session.commit()
    return obj

async def add_slot(session, doctor, start: time, end: time, *, day: date = TODAY, cabinet: int | None = 101, available: bool = True) -> Schedule:
    slot = Schedule(doctor_id=doctor.id, date=day, start_time=start, end_time=end, cabinet=cabinet, is_available=available)
    session.add(slot)
    await session.commit()
    return slot

async def add_patient(session, full_name="Ivan Ivanov", phone="79001234567") -> Patient:
    obj = Patient(full_name=full_name, phone=phone)
    session.add(obj)
    await session.commit()
    return obj

async def book(session, slot: Schedule, patient: Patient | None = None, ticket_id: int | None = None) -> Appointment:
    appt = Appointment(schedule_id=slot.id, patient_id=patient.id if patient else None, ticket_id=ticket_id, created_at=NOW)
    slot.is_available = False
    session.add(appt)
    await session.commit()
    return appt
