import enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Enum
from app.core.base import Base, IdMixin

class DoctorStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_BREAK = "on_break"

class Doctor(Base, IdMixin):
    full_name: Mapped[str] = mapped_column(String(200))
    specialization: Mapped[str] = mapped_column(String(120))
    status: Mapped[DoctorStatus] = mapped_column(
        Enum(DoctorStatus, native_enum=False, values_callable=lambda e: [m.value for m in e], length=16),
        default=DoctorStatus.INACTIVE,
    )
