from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from app.core.base import Base

class BusinessProcess(Base):
    __tablename__ = "businessprocess"
    process_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    is_enabled: Mapped[bool] = mapped_column(default=True)
