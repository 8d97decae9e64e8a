# Importing this module registers every mapped class on Base.metadata.
from app.modules.catalogs.models import Service  # noqa: F401
from app.modules.tickets.models import Ticket, ReceptionLog  # noqa: F401
from app.modules.doctors.models import Doctor  # noqa: F401
from app.modules.schedules.models import Schedule  # noqa: F401
from app.modules.patients.models import Patient  # noqa: F401
from app.modules.appointments.models import Appointment  # noqa: F401
from app.modules.processes.models import BusinessProcess  # noqa: F401
from app.modules.registrars.models import RegistrarPriority  # noqa: F401
