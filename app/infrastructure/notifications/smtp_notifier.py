import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional, Sequence

from ...application.ports.notifier import AppointmentNotifier
from ...config import settings
from ...domain import events
from ...domain.events import DomainEvent
from ...domain.value_objects import EmailAddress, UserInfo

logger = logging.getLogger(__name__)

SUBJECTS = {
    events.APPOINTMENT_CREATED: "New tutoring appointment",
    events.APPOINTMENT_STATUS_CHANGED: "Tutoring appointment status changed",
    events.APPOINTMENT_RESCHEDULED: "Tutoring appointment rescheduled",
    events.APPOINTMENT_COMPLETED: "Tutoring appointment completed",
    events.APPOINTMENT_DELETED: "Tutoring appointment removed",
    events.CHECKLIST_UPDATED: "Tutoring appointment tasks updated",
    events.REASON_UPDATED: "Tutoring appointment updated",
}


def _body(event: DomainEvent, recipient: UserInfo) -> str:
    lines = [f"Hello {recipient.name},", "", f"Appointment {event.aggregate_id}: {event.event_type}."]
    for key, value in event.payload.items():
        if value in (None, [], ""):
            continue
        lines.append(f"- {key.replace('_', ' ')}: {value}")
    return "\n".join(lines)


class SmtpAppointmentNotifier(AppointmentNotifier):
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        from_address: Optional[str] = None,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.from_address = EmailAddress(from_address or settings.EMAIL_FROM_ADDRESS)
        self._smtp_factory = smtp_factory

    def build_message(self, event: DomainEvent, recipient: UserInfo) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECTS.get(event.event_type, "Tutoring appointment update")
        msg["From"] = self.from_address.value
        msg["To"] = recipient.email.value
        msg.set_content(_body(event, recipient))
        return msg

    def notify(self, event: DomainEvent, recipients: Sequence[UserInfo]) -> None:
        if not recipients:
            return
        with self._smtp_factory(self.host, self.port, timeout=settings.SMTP_TIMEOUT_SECONDS) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            if self.username and self.password:
                server.login(self.username, self.password)
            for recipient in recipients:
                server.send_message(self.build_message(event, recipient))
                logger.info(f"Sent {event.event_type} email for appointment {event.aggregate_id} to {recipient.id}")
