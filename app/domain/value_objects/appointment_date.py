import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Union

from .. import clock
from ..errors import ValidationError

MIN_NOTICE = timedelta(minutes=30)
MAX_HORIZON = timedelta(days=365)
OPENING_HOUR = 8
CLOSING_HOUR = 20
RESCHEDULE_MIN_HOURS = 2

INVALID_DATE_MESSAGE = "Appointment date is not a valid date"
MIN_NOTICE_MESSAGE = "Appointment date must be at least 30 minutes in the future"
MAX_HORIZON_MESSAGE = "Appointment date cannot be more than one year in the future"
OPENING_HOURS_MESSAGE = "Appointment must be scheduled between 8:00 AM and 8:00 PM"
SUNDAY_MESSAGE = "Appointments cannot be scheduled on Sundays"


def _parse(value: Union[datetime, str, None]) -> datetime:
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(INVALID_DATE_MESSAGE) from None
    if not isinstance(value, datetime):
        raise ValidationError(INVALID_DATE_MESSAGE)
    if value.tzinfo is None:
        value = value.replace(tzinfo=clock.business_timezone())
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class AppointmentDate:
    """
    Instant of an appointment, stored in UTC.

    Construction enforces the booking rules: at least 30 minutes and at most
    365 days ahead, inside opening hours [8, 20) and never on a Sunday, with
    hour and weekday read in the business timezone. Naive datetimes are
    taken to be business-local.
    """

    value: datetime

    def __post_init__(self):
        instant = _parse(self.value)
        current = clock.now()
        if instant < current + MIN_NOTICE:
            raise ValidationError(MIN_NOTICE_MESSAGE)
        if instant > current + MAX_HORIZON:
            raise ValidationError(MAX_HORIZON_MESSAGE)
        local = instant.astimezone(clock.business_timezone())
        if local.hour < OPENING_HOUR or local.hour >= CLOSING_HOUR:
            raise ValidationError(OPENING_HOURS_MESSAGE)
        # datetime.weekday(): Monday is 0, Sunday is 6
        if local.weekday() == 6:
            raise ValidationError(SUNDAY_MESSAGE)
        object.__setattr__(self, "value", instant)

    @classmethod
    def from_date(cls, value: datetime) -> "AppointmentDate":
        return cls(value)

    @classmethod
    def from_string(cls, value: str) -> "AppointmentDate":
        return cls(value)

    @classmethod
    def restore(cls, value: Union[datetime, str]) -> "AppointmentDate":
        """Rebuild a stored date without re-applying the booking rules."""
        instance = cls.__new__(cls)
        object.__setattr__(instance, "value", _parse(value))
        return instance

    @property
    def local(self) -> datetime:
        return self.value.astimezone(clock.business_timezone())

    def is_in_past(self) -> bool:
        return self.value < clock.now()

    def is_in_future(self) -> bool:
        return self.value > clock.now()

    def is_past_due(self) -> bool:
        return self.value < clock.now()

    def is_today(self) -> bool:
        return self.local.date() == clock.now().astimezone(clock.business_timezone()).date()

    def days_until(self) -> int:
        seconds = (self.value - clock.now()).total_seconds()
        return math.ceil(seconds / 86400)

    def hours_until(self) -> int:
        seconds = (self.value - clock.now()).total_seconds()
        return math.ceil(seconds / 3600)

    def can_be_rescheduled(self) -> bool:
        return self.hours_until() > RESCHEDULE_MIN_HOURS

    def isoformat(self) -> str:
        return self.value.isoformat()

    def __str__(self) -> str:
        return self.isoformat()
