import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union
from datetime import datetime

from ...domain import (
    AppointmentAggregate,
    AppointmentCreationData,
    AppointmentNotFound,
    AppointmentStatus,
    AppointmentUpdateData,
    DuplicateAppointment,
    SlotConflict,
)
from ...domain import events
from ...domain.events import DomainEvent
from ...domain.value_objects import UserInfo
from ..ports.appointments_repo import AppointmentFilters, AppointmentsRepository, PaginationMeta
from ..ports.notifier import AppointmentNotifier
from ..ports.user_directory import UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    notifier: AppointmentNotifier
    users: UserDirectory

    def create(
        self,
        tutor_id: str,
        student_id: str,
        appointment_date: Union[datetime, str],
        checklist: Optional[Iterable[Any]] = None,
        reason: Optional[str] = None,
        appointment_id: Optional[str] = None,
    ) -> AppointmentAggregate:
        appointment = AppointmentAggregate.create(
            AppointmentCreationData(
                tutor_id=tutor_id,
                student_id=student_id,
                appointment_date=appointment_date,
                checklist=checklist,
                reason=reason,
                id=appointment_id,
            )
        )
        if appointment_id is not None and self.repo.exists(appointment.id.value):
            raise DuplicateAppointment(appointment.id.value)
        self._ensure_slot_free(appointment)
        saved = self.repo.save(appointment)
        logger.info(f"Appointment {saved.id} created for tutor {saved.tutor_id} and student {saved.student_id}")
        self._publish(saved, [events.appointment_created(saved)])
        return saved

    def get(self, appointment_id: str) -> AppointmentAggregate:
        appointment = self.repo.get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(appointment_id)
        return appointment

    def list(self, filters: AppointmentFilters) -> Tuple[List[AppointmentAggregate], PaginationMeta]:
        return self.repo.list(filters)

    def update(self, appointment_id: str, patch: AppointmentUpdateData) -> AppointmentAggregate:
        current = self.get(appointment_id)
        updated = current.update(patch)
        return self._commit(current, updated)

    def change_status(self, appointment_id: str, status: Union[AppointmentStatus, str]) -> AppointmentAggregate:
        current = self.get(appointment_id)
        return self._commit(current, current.transition_to(status))

    def reschedule(self, appointment_id: str, new_date: Union[datetime, str]) -> AppointmentAggregate:
        current = self.get(appointment_id)
        return self._commit(current, current.reschedule(new_date))

    def reopen(self, appointment_id: str, new_date: Union[datetime, str]) -> AppointmentAggregate:
        current = self.get(appointment_id)
        return self._commit(current, current.reopen(new_date))

    def complete(self, appointment_id: str, completed_task: Optional[str] = None) -> AppointmentAggregate:
        current = self.get(appointment_id)
        return self._commit(current, current.complete_appointment(completed_task))

    def delete(self, appointment_id: str) -> AppointmentAggregate:
        current = self.get(appointment_id)
        deleted = current.delete()
        self._persist(deleted)
        logger.info(f"Appointment {deleted.id} soft-deleted")
        self._publish(deleted, [events.appointment_deleted(deleted)])
        return deleted

    # helpers

    def _commit(self, before: AppointmentAggregate, after: AppointmentAggregate) -> AppointmentAggregate:
        if after.appointment_date != before.appointment_date:
            self._ensure_slot_free(after)
        saved = self._persist(after)
        changes = events.diff_events(before, saved)
        self._publish(saved, changes)
        return saved

    def _persist(self, appointment: AppointmentAggregate) -> AppointmentAggregate:
        saved = self.repo.update(appointment)
        if saved is None:
            # row vanished (or was deleted) between read and write
            raise AppointmentNotFound(appointment.id.value)
        return saved

    def _ensure_slot_free(self, appointment: AppointmentAggregate) -> None:
        conflicts = self.repo.find_conflicts(
            appointment.tutor_id.value,
            appointment.student_id.value,
            appointment.appointment_date.value,
            exclude_id=appointment.id.value,
        )
        if conflicts:
            logger.warning(
                f"Slot conflict for appointment {appointment.id} at {appointment.appointment_date}: "
                f"{[c.id.value for c in conflicts]}"
            )
            raise SlotConflict()

    def _recipients(self, appointment: AppointmentAggregate) -> Sequence[UserInfo]:
        recipients = []
        for user_id in (appointment.tutor_id.value, appointment.student_id.value):
            user = self.users.get_user(user_id)
            if user is None:
                logger.warning(f"No contact details for user {user_id}; skipping notification")
                continue
            recipients.append(user)
        return recipients

    def _publish(self, appointment: AppointmentAggregate, changes: Sequence[DomainEvent]) -> None:
        # Notification problems never fail the request that triggered them.
        if not changes:
            return
        try:
            recipients = self._recipients(appointment)
        except Exception:
            logger.exception(f"Could not resolve notification recipients for appointment {appointment.id}")
            return
        for event in changes:
            try:
                self.notifier.notify(event, recipients)
            except Exception:
                logger.exception(f"Failed to send {event.event_type} notification for appointment {appointment.id}")


def parse_status_filter(value: Optional[str]) -> Optional[AppointmentStatus]:
    if value is None or value == "":
        return None
    return AppointmentStatus.from_string(value)
