from enum import Enum
from typing import Dict, FrozenSet

from ..errors import ValidationError


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    @classmethod
    def from_string(cls, value: str) -> "AppointmentStatus":
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValidationError(f"Invalid appointment status: {value}. Valid statuses: {valid}") from None

    def can_transition_to(self, target: "AppointmentStatus") -> bool:
        return target in TRANSITIONS[self]

    def allowed_transitions(self) -> FrozenSet["AppointmentStatus"]:
        return TRANSITIONS[self]

    def can_be_modified(self) -> bool:
        return self in MODIFIABLE_STATUSES

    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    def is_pending(self) -> bool:
        return self is AppointmentStatus.PENDING

    def is_confirmed(self) -> bool:
        return self is AppointmentStatus.CONFIRMED

    def is_cancelled(self) -> bool:
        return self is AppointmentStatus.CANCELLED

    def is_completed(self) -> bool:
        return self is AppointmentStatus.COMPLETED

    def is_no_show(self) -> bool:
        return self is AppointmentStatus.NO_SHOW

    def __str__(self) -> str:
        return self.value


# current status -> statuses it may move to
TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.CANCELLED: frozenset({AppointmentStatus.PENDING}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset({AppointmentStatus.PENDING}),
}

MODIFIABLE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})
