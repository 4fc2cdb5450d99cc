# Models package (re-export feature modules for stable imports)
from .users.user import User
from .scheduling.appointment import AppointmentRecord

__all__ = [
    "User",
    "AppointmentRecord",
]
