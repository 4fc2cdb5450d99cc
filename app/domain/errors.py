# app/domain/errors.py
from typing import Optional


class AppointmentError(Exception):
    """Base class for every failure raised by the appointment core."""

    code = "APPOINTMENT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppointmentError, ValueError):
    code = "VALIDATION_ERROR"


class InvalidTransition(AppointmentError):
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid status transition: {current} -> {target}")
        self.current = current
        self.target = target


class DeletedAppointment(AppointmentError):
    code = "DELETED_APPOINTMENT"


class UnmodifiableState(AppointmentError):
    code = "UNMODIFIABLE_STATE"

    def __init__(self, status: str, action: str = "modify"):
        super().__init__(f"Cannot {action} an appointment in status {status}")
        self.status = status


class RescheduleWindowViolation(AppointmentError):
    code = "RESCHEDULE_WINDOW_VIOLATION"


# Raised by the use-case layer, never by the aggregate itself.

class AppointmentNotFound(AppointmentError):
    code = "NOT_FOUND"

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id


class SlotConflict(AppointmentError):
    code = "CONFLICT"

    def __init__(self, message: str = "An appointment already exists for this time slot"):
        super().__init__(message)


class DuplicateAppointment(AppointmentError):
    code = "DUPLICATE_ID"

    def __init__(self, appointment_id: str):
        super().__init__(f"Appointment id {appointment_id} is already taken")
        self.appointment_id = appointment_id


class AppointmentTimingError(AppointmentError):
    """The appointment's date does not allow the requested status change yet (or any more)."""

    code = "INVALID_TIMING"
