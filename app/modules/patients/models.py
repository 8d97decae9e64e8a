from datetime import date
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Date
from app.core.base import Base, IdMixin

class Patient(Base, IdMixin):
    full_name: Mapped[str] = mapped_column(String(200))
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)  # digits only
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
