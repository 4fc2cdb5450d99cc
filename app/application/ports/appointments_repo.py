from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple
from datetime import datetime, timedelta

from ...domain import AppointmentAggregate, AppointmentStatus

# Appointments closer than this to each other collide for the same tutor or student.
CONFLICT_WINDOW = timedelta(hours=1)
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class AppointmentFilters:
    tutor_id: Optional[str] = None
    student_id: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PaginationMeta:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = -(-total // limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class AppointmentsRepository(Protocol):
    """Storage for appointment aggregates. Deleted appointments are invisible to reads."""

    def save(self, appointment: AppointmentAggregate) -> AppointmentAggregate:
        ...

    def update(self, appointment: AppointmentAggregate) -> Optional[AppointmentAggregate]:
        ...

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentAggregate]:
        ...

    def exists(self, appointment_id: str) -> bool:
        """True if the id is taken, soft-deleted rows included."""
        ...

    def list(self, filters: AppointmentFilters) -> Tuple[List[AppointmentAggregate], PaginationMeta]:
        ...

    def find_conflicts(
        self,
        tutor_id: str,
        student_id: str,
        at: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[AppointmentAggregate]:
        ...
