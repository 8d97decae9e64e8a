import enum
from datetime import datetime, timedelta
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, ForeignKey, DateTime, Interval, LargeBinary, Enum
from app.core.base import Base, IdMixin
from app.core import clock

class TicketStatus(str, enum.Enum):
    WAITING = "waiting"
    INVITED = "invited"
    REGISTERED = "registered"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

def _values(e):
    return [m.value for m in e]

class Ticket(Base, IdMixin):
    ticket_number: Mapped[str] = mapped_column(String(8), unique=True, index=True)  # letter + 3 digits, e.g. A001
    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus, native_enum=False, values_callable=_values, length=16),
        default=TicketStatus.WAITING, index=True,
    )
    service_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    window_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    qr_code: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: clock.now())
    called_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

class ReceptionLog(Base, IdMixin):
    # one row per registrar-window call; closed when the visit is finalized
    ticket_id: Mapped[int] = mapped_column(ForeignKey("ticket.id", ondelete="CASCADE"), index=True)
    registrar_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    window_number: Mapped[int] = mapped_column(Integer)
    called_at: Mapped[datetime] = mapped_column(DateTime)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration: Mapped[timedelta | None] = mapped_column(Interval, nullable=True)
