import json
import logging
from typing import Sequence

from ...application.ports.notifier import AppointmentNotifier
from ...domain.events import DomainEvent
from ...domain.value_objects import UserInfo


class LogAppointmentNotifier(AppointmentNotifier):
    """Writes one structured line per event instead of sending mail."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def notify(self, event: DomainEvent, recipients: Sequence[UserInfo]) -> None:
        entry = {
            **event.to_dict(),
            "recipients": [r.id.value for r in recipients],
        }
        self._logger.info(f"NOTIFY: {json.dumps(entry, default=str)}")
