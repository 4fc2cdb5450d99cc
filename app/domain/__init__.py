# Appointment core: value objects, the aggregate and its errors. No I/O happens here.
from .aggregates import UNSET, AppointmentAggregate, AppointmentCreationData, AppointmentUpdateData
from .errors import (
    AppointmentError,
    AppointmentNotFound,
    AppointmentTimingError,
    DeletedAppointment,
    DuplicateAppointment,
    InvalidTransition,
    RescheduleWindowViolation,
    SlotConflict,
    UnmodifiableState,
    ValidationError,
)
from .value_objects import AppointmentDate, AppointmentId, AppointmentStatus, Checklist, TimeStamps, UserId

__all__ = [
    "UNSET",
    "AppointmentAggregate",
    "AppointmentCreationData",
    "AppointmentUpdateData",
    "AppointmentDate",
    "AppointmentId",
    "AppointmentStatus",
    "Checklist",
    "TimeStamps",
    "UserId",
    "AppointmentError",
    "AppointmentNotFound",
    "AppointmentTimingError",
    "DeletedAppointment",
    "DuplicateAppointment",
    "InvalidTransition",
    "RescheduleWindowViolation",
    "SlotConflict",
    "UnmodifiableState",
    "ValidationError",
]
