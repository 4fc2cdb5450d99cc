# app/schemas/appointments/appointment.py
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union
from datetime import datetime

from ...domain import UNSET, AppointmentUpdateData

StatusValue = Literal["pending", "confirmed", "cancelled", "completed", "no_show"]


class ChecklistItemSchema(BaseModel):
    description: str
    completed: bool = False


# plain strings are accepted as not-yet-completed items
ChecklistEntry = Union[ChecklistItemSchema, str]


def _checklist_entries(items: List[ChecklistEntry]) -> list:
    return [item if isinstance(item, str) else item.model_dump() for item in items]


class AppointmentCreate(BaseModel):
    tutor_id: str
    student_id: str
    appointment_date: datetime
    checklist: List[ChecklistEntry] = []
    reason: Optional[str] = None
    id: Optional[str] = None

    def checklist_entries(self) -> list:
        return _checklist_entries(self.checklist)


class AppointmentUpdate(BaseModel):
    status: Optional[StatusValue] = None
    appointment_date: Optional[datetime] = None
    checklist: Optional[List[ChecklistEntry]] = None
    reason: Optional[str] = None

    def to_patch(self) -> AppointmentUpdateData:
        """Only fields present in the request body take part in the update."""
        sent = self.model_fields_set
        return AppointmentUpdateData(
            status=self.status,
            appointment_date=self.appointment_date,
            checklist=_checklist_entries(self.checklist or []) if "checklist" in sent else UNSET,
            reason=self.reason if "reason" in sent else UNSET,
        )


class AppointmentStatusUpdate(BaseModel):
    status: StatusValue


class AppointmentReschedule(BaseModel):
    appointment_date: datetime


class AppointmentComplete(BaseModel):
    completed_task: Optional[str] = Field(default=None, max_length=1000)


class AppointmentResponse(BaseModel):
    id: str
    tutor_id: str
    student_id: str
    status: StatusValue
    appointment_date: datetime
    checklist: List[ChecklistItemSchema] = []
    reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class AppointmentEnvelope(BaseModel):
    success: bool = True
    data: Optional[AppointmentResponse] = None
    error: Optional[str] = None


class AppointmentListEnvelope(BaseModel):
    success: bool = True
    data: List[AppointmentResponse] = []
    pagination: PaginationSchema
    error: Optional[str] = None
