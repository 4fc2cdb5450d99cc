# app/domain/aggregates/appointment.py
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from ..errors import (
    AppointmentTimingError,
    DeletedAppointment,
    InvalidTransition,
    RescheduleWindowViolation,
    UnmodifiableState,
    ValidationError,
)
from ..value_objects import (
    AppointmentDate,
    AppointmentId,
    AppointmentStatus,
    Checklist,
    TimeStamps,
    UserId,
    normalize_reason,
)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# Marks a patch field the caller did not send (distinct from an explicit None).
UNSET: Any = _Unset()

DateInput = Union[datetime, str]


@dataclass
class AppointmentCreationData:
    tutor_id: str
    student_id: str
    appointment_date: DateInput
    checklist: Optional[Iterable[Any]] = None
    reason: Optional[str] = None
    id: Optional[str] = None


@dataclass
class AppointmentUpdateData:
    status: Optional[Union[AppointmentStatus, str]] = None
    appointment_date: Optional[DateInput] = None
    checklist: Any = UNSET
    reason: Any = UNSET


@dataclass(frozen=True, eq=False)
class AppointmentAggregate:
    """
    Appointment entity of record. Owns every status and date invariant.

    Instances are immutable: each operation returns a new snapshot or raises
    one of the errors in ``app.domain.errors``. Equality is by id only.
    """

    id: AppointmentId
    tutor_id: UserId
    student_id: UserId
    status: AppointmentStatus
    appointment_date: AppointmentDate
    timestamps: TimeStamps
    checklist: Checklist = field(default_factory=Checklist)
    reason: Optional[str] = None

    # Factories

    @classmethod
    def create(cls, data: AppointmentCreationData) -> "AppointmentAggregate":
        return cls(
            id=AppointmentId(data.id) if data.id is not None else AppointmentId.generate(),
            tutor_id=UserId(data.tutor_id),
            student_id=UserId(data.student_id),
            status=AppointmentStatus.PENDING,
            appointment_date=AppointmentDate(data.appointment_date),
            timestamps=TimeStamps.create(),
            checklist=Checklist.create(data.checklist),
            reason=normalize_reason(data.reason),
        )

    @classmethod
    def from_persistence(cls, record: Mapping[str, Any]) -> "AppointmentAggregate":
        return cls(
            id=AppointmentId(record["id"]),
            tutor_id=UserId(record["tutor_id"]),
            student_id=UserId(record["student_id"]),
            status=AppointmentStatus.from_string(record["status"]),
            appointment_date=AppointmentDate.restore(record["appointment_date"]),
            timestamps=TimeStamps(record["created_at"], record["updated_at"], record.get("deleted_at")),
            checklist=Checklist.create(record.get("checklist") or []),
            reason=normalize_reason(record.get("reason")),
        )

    # Guards

    def _ensure_not_deleted(self, action: str) -> None:
        if self.timestamps.is_deleted():
            raise DeletedAppointment(f"Cannot {action} a deleted appointment")

    def _ensure_transition(self, target: AppointmentStatus, action: str) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidTransition(
                self.status.value,
                target.value,
                f"Cannot {action} an appointment in status {self.status.value} "
                f"(invalid status transition {self.status.value} -> {target.value})",
            )

    def _ensure_modifiable(self, action: str) -> None:
        if not self.status.can_be_modified():
            raise UnmodifiableState(self.status.value, action)

    def _with_status(self, status: AppointmentStatus, **changes) -> "AppointmentAggregate":
        return replace(self, status=status, timestamps=self.timestamps.mark_as_updated(), **changes)

    # Status transitions

    def confirm_appointment(self) -> "AppointmentAggregate":
        self._ensure_not_deleted("confirm")
        self._ensure_transition(AppointmentStatus.CONFIRMED, "confirm")
        if self.appointment_date.is_past_due():
            raise AppointmentTimingError("Cannot confirm an appointment that has already passed")
        return self._with_status(AppointmentStatus.CONFIRMED)

    def cancel_appointment(self) -> "AppointmentAggregate":
        self._ensure_not_deleted("cancel")
        self._ensure_transition(AppointmentStatus.CANCELLED, "cancel")
        return self._with_status(AppointmentStatus.CANCELLED)

    def complete_appointment(self, completed_task: Optional[str] = None) -> "AppointmentAggregate":
        self._ensure_not_deleted("complete")
        self._ensure_transition(AppointmentStatus.COMPLETED, "complete")
        if self.appointment_date.is_in_future():
            raise AppointmentTimingError("Cannot complete an appointment that has not happened yet")
        checklist = self.checklist
        if completed_task:
            checklist = checklist.complete_task(completed_task)
        return self._with_status(AppointmentStatus.COMPLETED, checklist=checklist)

    def mark_as_no_show(self) -> "AppointmentAggregate":
        self._ensure_not_deleted("mark as no-show")
        self._ensure_transition(AppointmentStatus.NO_SHOW, "mark as no-show")
        if self.appointment_date.is_in_future():
            raise AppointmentTimingError("Cannot mark as no-show an appointment that has not happened yet")
        return self._with_status(AppointmentStatus.NO_SHOW)

    def transition_to(self, target: Union[AppointmentStatus, str]) -> "AppointmentAggregate":
        """Apply the named operation for ``target``; same status is a no-op."""
        if not isinstance(target, AppointmentStatus):
            target = AppointmentStatus.from_string(target)
        self._ensure_not_deleted("change the status of")
        if target is self.status:
            return self
        if target is AppointmentStatus.CONFIRMED:
            return self.confirm_appointment()
        if target is AppointmentStatus.CANCELLED:
            return self.cancel_appointment()
        if target is AppointmentStatus.COMPLETED:
            return self.complete_appointment()
        if target is AppointmentStatus.NO_SHOW:
            return self.mark_as_no_show()
        # pending is only reachable by rescheduling or reopening
        self._ensure_transition(target, "change the status of")
        raise InvalidTransition(
            self.status.value,
            target.value,
            f"Appointment in status {self.status.value} can only return to pending with a new date",
        )

    # Date changes

    def _new_date(self, new_date: DateInput) -> AppointmentDate:
        try:
            return AppointmentDate(new_date)
        except ValidationError as exc:
            raise RescheduleWindowViolation(exc.message) from exc

    def reschedule(self, new_date: DateInput) -> "AppointmentAggregate":
        self._ensure_not_deleted("reschedule")
        self._ensure_modifiable("reschedule")
        if not self.appointment_date.can_be_rescheduled():
            raise RescheduleWindowViolation("Cannot reschedule an appointment with less than 2 hours notice")
        return self._with_status(AppointmentStatus.PENDING, appointment_date=self._new_date(new_date))

    def reopen(self, new_date: DateInput) -> "AppointmentAggregate":
        """Bring a cancelled or no-show appointment back to pending on a new date."""
        self._ensure_not_deleted("reopen")
        if self.status.can_be_modified():
            raise InvalidTransition(
                self.status.value,
                AppointmentStatus.PENDING.value,
                f"Appointment in status {self.status.value} is still open; reschedule it instead",
            )
        self._ensure_transition(AppointmentStatus.PENDING, "reopen")
        return self._with_status(AppointmentStatus.PENDING, appointment_date=self._new_date(new_date))

    # Checklist and reason

    def update_checklist(self, checklist: Optional[Iterable[Any]]) -> "AppointmentAggregate":
        self._ensure_not_deleted("update the checklist of")
        self._ensure_modifiable("update the checklist of")
        return replace(self, checklist=Checklist.create(checklist), timestamps=self.timestamps.mark_as_updated())

    def update_reason(self, reason: Optional[str]) -> "AppointmentAggregate":
        self._ensure_not_deleted("update the reason of")
        self._ensure_modifiable("update the reason of")
        return replace(self, reason=normalize_reason(reason), timestamps=self.timestamps.mark_as_updated())

    def update(self, data: AppointmentUpdateData) -> "AppointmentAggregate":
        """
        Apply a patch in the fixed order status, date, checklist, reason.

        Any failing step raises before a result is returned, so callers never
        observe a partially applied patch. Checklist and reason edits are
        allowed whenever the appointment was modifiable before the patch,
        which lets a cancellation carry its reason.
        """
        self._ensure_not_deleted("update")
        self._ensure_modifiable("update")

        updated = self
        if data.status is not None:
            updated = updated.transition_to(data.status)
        if data.appointment_date is not None:
            updated = updated.reschedule(data.appointment_date)

        changes = {}
        if data.checklist is not UNSET:
            changes["checklist"] = Checklist.create(data.checklist)
        if data.reason is not UNSET:
            changes["reason"] = normalize_reason(data.reason)
        if changes:
            updated = replace(updated, timestamps=updated.timestamps.mark_as_updated(), **changes)
        return updated

    # Soft delete

    def delete(self) -> "AppointmentAggregate":
        if self.timestamps.is_deleted():
            raise DeletedAppointment("Appointment is already deleted")
        return replace(self, timestamps=self.timestamps.mark_as_deleted())

    # Queries

    def is_deleted(self) -> bool:
        return self.timestamps.is_deleted()

    def is_pending(self) -> bool:
        return self.status.is_pending()

    def is_confirmed(self) -> bool:
        return self.status.is_confirmed()

    def is_cancelled(self) -> bool:
        return self.status.is_cancelled()

    def is_completed(self) -> bool:
        return self.status.is_completed()

    def is_no_show(self) -> bool:
        return self.status.is_no_show()

    def can_be_modified(self) -> bool:
        return not self.is_deleted() and self.status.can_be_modified()

    def can_be_rescheduled(self) -> bool:
        return self.can_be_modified() and self.appointment_date.can_be_rescheduled()

    def is_upcoming(self) -> bool:
        return self.appointment_date.is_in_future() and not self.is_deleted()

    def is_past_due(self) -> bool:
        return self.appointment_date.is_past_due()

    # Serialization

    def to_json(self) -> dict:
        deleted_at = self.timestamps.deleted_at
        return {
            "id": self.id.value,
            "tutor_id": self.tutor_id.value,
            "student_id": self.student_id.value,
            "status": self.status.value,
            "appointment_date": self.appointment_date.isoformat(),
            "checklist": self.checklist.to_list(),
            "reason": self.reason,
            "created_at": self.timestamps.created_at.isoformat(),
            "updated_at": self.timestamps.updated_at.isoformat(),
            "deleted_at": deleted_at.isoformat() if deleted_at else None,
        }

    def to_persistence(self) -> dict:
        return {
            "id": self.id.value,
            "tutor_id": self.tutor_id.value,
            "student_id": self.student_id.value,
            "status": self.status.value,
            "appointment_date": self.appointment_date.value,
            "checklist": self.checklist.to_list(),
            "reason": self.reason,
            **self.timestamps.to_dict(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppointmentAggregate):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
