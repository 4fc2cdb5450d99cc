# app/domain/events.py
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from . import clock
from .aggregates import AppointmentAggregate


@dataclass(frozen=True)
class DomainEvent:
    event_type: str
    aggregate_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: clock.now())
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "payload": self.payload,
        }


APPOINTMENT_CREATED = "AppointmentCreated"
APPOINTMENT_STATUS_CHANGED = "AppointmentStatusChanged"
APPOINTMENT_RESCHEDULED = "AppointmentRescheduled"
APPOINTMENT_COMPLETED = "AppointmentCompleted"
APPOINTMENT_DELETED = "AppointmentDeleted"
CHECKLIST_UPDATED = "ChecklistUpdated"
REASON_UPDATED = "ReasonUpdated"


def appointment_created(appointment: AppointmentAggregate) -> DomainEvent:
    return DomainEvent(
        APPOINTMENT_CREATED,
        appointment.id.value,
        {
            "tutor_id": appointment.tutor_id.value,
            "student_id": appointment.student_id.value,
            "appointment_date": appointment.appointment_date.isoformat(),
            "checklist": appointment.checklist.to_list(),
            "reason": appointment.reason,
        },
    )


def appointment_deleted(appointment: AppointmentAggregate) -> DomainEvent:
    deleted_at = appointment.timestamps.deleted_at
    return DomainEvent(
        APPOINTMENT_DELETED,
        appointment.id.value,
        {"deleted_at": deleted_at.isoformat() if deleted_at else None, "reason": appointment.reason},
    )


def diff_events(before: AppointmentAggregate, after: AppointmentAggregate) -> List[DomainEvent]:
    """Events describing what changed between two snapshots of the same appointment."""
    events: List[DomainEvent] = []
    aggregate_id = after.id.value
    changed_at = after.timestamps.updated_at.isoformat()

    if before.appointment_date != after.appointment_date:
        events.append(
            DomainEvent(
                APPOINTMENT_RESCHEDULED,
                aggregate_id,
                {
                    "previous_date": before.appointment_date.isoformat(),
                    "new_date": after.appointment_date.isoformat(),
                    "rescheduled_at": changed_at,
                },
            )
        )

    if before.status is not after.status:
        if after.is_completed():
            completed = [item.description.value for item in after.checklist.completed_items]
            events.append(
                DomainEvent(
                    APPOINTMENT_COMPLETED,
                    aggregate_id,
                    {"completed_at": changed_at, "completed_tasks": completed},
                )
            )
        else:
            events.append(
                DomainEvent(
                    APPOINTMENT_STATUS_CHANGED,
                    aggregate_id,
                    {
                        "previous_status": before.status.value,
                        "new_status": after.status.value,
                        "changed_at": changed_at,
                    },
                )
            )

    # a completion already carries its completed tasks
    if before.checklist != after.checklist and not (after.is_completed() and not before.is_completed()):
        events.append(
            DomainEvent(
                CHECKLIST_UPDATED,
                aggregate_id,
                {
                    "previous_checklist": before.checklist.to_list(),
                    "new_checklist": after.checklist.to_list(),
                    "updated_at": changed_at,
                },
            )
        )
    if before.reason != after.reason:
        events.append(
            DomainEvent(
                REASON_UPDATED,
                aggregate_id,
                {"previous_reason": before.reason, "new_reason": after.reason, "updated_at": changed_at},
            )
        )
    return events
