from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String
from app.core.base import Base, IdMixin

class Service(Base, IdMixin):
    service_id: Mapped[str] = mapped_column(String(64), unique=True)  # stable tag used by terminals, e.g. "make_appointment"
    name: Mapped[str] = mapped_column(String(160))
    letter: Mapped[str] = mapped_column(String(1))  # ticket number prefix
