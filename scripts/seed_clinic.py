import asyncio
import os
import sys
from datetime import timedelta, time
from sqlalchemy import select

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core import clock
from app.core.db import SessionLocal, init_models
from app.modules.catalogs.models import Service
from app.modules.doctors.models import Doctor
from app.modules.schedules.models import Schedule

SERVICES = [
    {"service_id": "make_appointment", "name": "Make an appointment", "letter": "A"},
    {"service_id": "confirm_appointment", "name": "Confirm an appointment", "letter": "B"},
    {"service_id": "analysis_results", "name": "Analysis results", "letter": "C"},
    {"service_id": "other_question", "name": "Other question", "letter": "D"},
]

DOCTORS = [
    {"full_name": "Anna Petrova", "specialization": "Therapist", "cabinet": 101},
    {"full_name": "Ivan Sokolov", "specialization": "Cardiologist", "cabinet": 102},
    {"full_name": "Maria Orlova", "specialization": "Neurologist", "cabinet": 205},
]

def day_slots(start_hour=9, end_hour=13, minutes=20):
    """
    Yields (start, end) pairs covering the working block.
    """
    cur = start_hour * 60
    while cur + minutes <= end_hour * 60:
        yield time(cur // 60, cur % 60), time((cur + minutes) // 60, (cur + minutes) % 60)
        cur += minutes

async def main(days: int = 3):
    print("Seeding clinic data...")
    await init_models()

    async with SessionLocal() as db:
        for svc in SERVICES:
            res = await db.execute(select(Service).where(Service.service_id == svc["service_id"]))
            if res.scalars().first():
                print(f"  - Service '{svc['service_id']}' already exists. Skipping.")
                continue
            db.add(Service(**svc))
            print(f"  - Created service '{svc['service_id']}' ({svc['letter']})")

        today = clock.now().date()
        for doc in DOCTORS:
            res = await db.execute(select(Doctor).where(Doctor.full_name == doc["full_name"]))
            doctor = res.scalars().first()
            if doctor:
                print(f"  - Doctor '{doc['full_name']}' already exists. Skipping.")
                continue
            doctor = Doctor(full_name=doc["full_name"], specialization=doc["specialization"])
            db.add(doctor)
            await db.flush()
            print(f"  - Created doctor {doctor.full_name} with ID: {doctor.id}")

            for offset in range(days):
                for start, end in day_slots():
                    db.add(Schedule(
                        doctor_id=doctor.id,
                        date=today + timedelta(days=offset),
                        start_time=start,
                        end_time=end,
                        cabinet=doc["cabinet"],
                    ))
            print(f"    ...{days} days of slots created in cabinet {doc['cabinet']}.")

        print("\nCommitting all changes to the database...")
        await db.commit()
        print("Seeding complete!")

if __name__ == "__main__":
    asyncio.run(main())
