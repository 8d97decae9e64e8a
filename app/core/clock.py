from datetime import datetime
from zoneinfo import ZoneInfo
from .config import settings

def now() -> datetime:
    """Clinic wall-clock time.

    Schedule dates and times are stored naive in the clinic's local zone, so every
    timestamp the services write is naive too.
    """
    if settings.CLINIC_TZ:
        return datetime.now(ZoneInfo(settings.CLINIC_TZ)).replace(tzinfo=None)
    return datetime.now()
