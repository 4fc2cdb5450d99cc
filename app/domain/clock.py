from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from ..config import settings


def now() -> datetime:
    """Current instant, timezone-aware UTC. Tests monkeypatch this."""
    return datetime.now(timezone.utc)


def business_timezone() -> tzinfo:
    """Timezone in which opening hours and weekdays are evaluated."""
    name = settings.BUSINESS_TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)
