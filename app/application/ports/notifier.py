from typing import Protocol, Sequence

from ...domain.events import DomainEvent
from ...domain.value_objects import UserInfo


class AppointmentNotifier(Protocol):
    def notify(self, event: DomainEvent, recipients: Sequence[UserInfo]) -> None:
        ...
