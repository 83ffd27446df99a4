from datetime import datetime
from zoneinfo import ZoneInfo

from spotbook.app.core.config import settings


def default_clock() -> datetime:
    """Current time in the configured zone, or local time when none is set."""
    if settings.TIMEZONE:
        return datetime.now(ZoneInfo(settings.TIMEZONE))
    return datetime.now()
