import logging
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

log = logging.getLogger(__name__)

engine = create_async_engine(settings.POSTGRES_DSN, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_session():
    async with SessionLocal() as session:
        yield session

async def init_models():
    # In dev-only "create_all" mode tables and notify triggers are created here; otherwise migrations own the schema.
    if settings.DB_MANAGE.lower() != "create_all":
        return
    import app.models  # noqa: F401  registers every mapped class on Base.metadata
    from app.modules.events.triggers import TRIGGER_DDL
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        if conn.dialect.name == "postgresql":
            for stmt in TRIGGER_DDL:
                await conn.exec_driver_sql(stmt)
            log.info("Change notification triggers installed")
