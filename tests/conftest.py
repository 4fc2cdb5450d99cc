import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BUSINESS_TIMEZONE", "UTC")
os.environ.setdefault("NOTIFICATIONS_BACKEND", "log")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")

from app.domain import clock as domain_clock  # noqa: E402

# Monday 2026-01-05 09:00 UTC
MONDAY_9AM = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, current: datetime):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock(monkeypatch):
    frozen = FrozenClock(MONDAY_9AM)
    monkeypatch.setattr(domain_clock, "now", frozen)
    return frozen
