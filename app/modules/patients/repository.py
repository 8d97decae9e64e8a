import re
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.modules.patients.models import Patient

def normalize_phone(raw: str) -> str:
    return re.sub(r"\D", "", raw or "")

class PatientRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, patient_id: int) -> Patient | None:
        return await self.session.get(Patient, patient_id)

    async def find_by_phone(self, phone: str) -> Patient | None:
        q = select(Patient).where(Patient.phone == normalize_phone(phone)).order_by(Patient.id.asc()).limit(1)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()
