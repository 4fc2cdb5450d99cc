from .appointment_date import AppointmentDate
from .appointment_status import AppointmentStatus, TRANSITIONS
from .checklist import Checklist, ChecklistItem, TaskText, normalize_reason
from .email_address import EmailAddress
from .identifiers import AppointmentId, UserId
from .timestamps import TimeStamps
from .user_info import UserInfo, UserRole

__all__ = [
    "AppointmentDate",
    "AppointmentId",
    "AppointmentStatus",
    "Checklist",
    "ChecklistItem",
    "EmailAddress",
    "TaskText",
    "TimeStamps",
    "TRANSITIONS",
    "UserId",
    "UserInfo",
    "UserRole",
    "normalize_reason",
]
