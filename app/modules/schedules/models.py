from datetime import date, time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import ForeignKey, Date, Time, Integer, UniqueConstraint
from app.core.base import Base, IdMixin

class Schedule(Base, IdMixin):
    doctor_id: Mapped[int] = mapped_column(ForeignKey("doctor.id", ondelete="CASCADE"), index=True)
    date: Mapped[date] = mapped_column(Date, index=True)
    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)
    is_available: Mapped[bool] = mapped_column(default=True)  # false iff an appointment references the slot
    cabinet: Mapped[int | None] = mapped_column(Integer, nullable=True)
    __table_args__ = (UniqueConstraint("doctor_id", "date", "start_time", name="uq_schedule_doctor_date_start"),)
