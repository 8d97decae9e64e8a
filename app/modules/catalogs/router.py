from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.db import get_session
from app.modules.catalogs.schemas import ServiceOut
from app.modules.catalogs.repository import CatalogRepository

router = APIRouter()

@router.get("/services", response_model=list[ServiceOut])
async def list_services(s: AsyncSession = Depends(get_session)):
    return await CatalogRepository(s).list_services()
