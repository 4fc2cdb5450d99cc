from ...config import settings
from .log_notifier import LogAppointmentNotifier
from .smtp_notifier import SmtpAppointmentNotifier


def build_notifier():
    backend = settings.NOTIFICATIONS_BACKEND.lower()
    if backend == "smtp":
        return SmtpAppointmentNotifier()
    if backend != "log":
        raise RuntimeError(f"Unknown NOTIFICATIONS_BACKEND: {settings.NOTIFICATIONS_BACKEND}")
    return LogAppointmentNotifier()
