from typing import List, Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import FlushError
from sqlmodel import Session, select

from .....db.models import AppointmentRecord
from .....domain import AppointmentAggregate, AppointmentStatus, DuplicateAppointment
from .....application.ports.appointments_repo import (
    CONFLICT_WINDOW,
    AppointmentFilters,
    AppointmentsRepository,
    PaginationMeta,
)

ACTIVE_STATUSES = [AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value]


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_aggregate(self, row: AppointmentRecord) -> AppointmentAggregate:
        return AppointmentAggregate.from_persistence(
            {
                "id": row.id,
                "tutor_id": row.tutor_id,
                "student_id": row.student_id,
                "status": row.status,
                "appointment_date": _utc(row.appointment_date),
                "checklist": row.checklist or [],
                "reason": row.reason,
                "created_at": _utc(row.created_at),
                "updated_at": _utc(row.updated_at),
                "deleted_at": _utc(row.deleted_at),
            }
        )

    def _copy_into(self, row: AppointmentRecord, appointment: AppointmentAggregate) -> None:
        data = appointment.to_persistence()
        for key in ("tutor_id", "student_id", "status", "appointment_date", "checklist", "reason",
                    "created_at", "updated_at", "deleted_at"):
            setattr(row, key, data[key])

    def _active(self):
        return select(AppointmentRecord).where(AppointmentRecord.deleted_at.is_(None))

    def save(self, appointment: AppointmentAggregate) -> AppointmentAggregate:
        row = AppointmentRecord(id=appointment.id.value)
        self._copy_into(row, appointment)
        self.session.add(row)
        try:
            self.session.commit()
        except (IntegrityError, FlushError):
            # the id is already taken, by a concurrent insert or a row this session holds
            self.session.rollback()
            raise DuplicateAppointment(appointment.id.value) from None
        self.session.refresh(row)
        return self._to_aggregate(row)

    def update(self, appointment: AppointmentAggregate) -> Optional[AppointmentAggregate]:
        row = self.session.exec(
            self._active().where(AppointmentRecord.id == appointment.id.value)
        ).first()
        if not row:
            return None
        self._copy_into(row, appointment)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_aggregate(row)

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentAggregate]:
        row = self.session.exec(self._active().where(AppointmentRecord.id == appointment_id)).first()
        return self._to_aggregate(row) if row else None

    def exists(self, appointment_id: str) -> bool:
        return self.session.get(AppointmentRecord, appointment_id) is not None

    def list(self, filters: AppointmentFilters) -> Tuple[List[AppointmentAggregate], PaginationMeta]:
        conditions = [AppointmentRecord.deleted_at.is_(None)]
        if filters.tutor_id:
            conditions.append(AppointmentRecord.tutor_id == filters.tutor_id)
        if filters.student_id:
            conditions.append(AppointmentRecord.student_id == filters.student_id)
        if filters.status:
            conditions.append(AppointmentRecord.status == filters.status.value)
        if filters.date_from:
            conditions.append(AppointmentRecord.appointment_date >= filters.date_from)
        if filters.date_to:
            conditions.append(AppointmentRecord.appointment_date <= filters.date_to)

        total = self.session.exec(
            select(func.count()).select_from(AppointmentRecord).where(*conditions)
        ).one()
        rows = self.session.exec(
            select(AppointmentRecord)
            .where(*conditions)
            .order_by(AppointmentRecord.appointment_date.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        ).all()
        return [self._to_aggregate(r) for r in rows], PaginationMeta.build(filters.page, filters.limit, int(total))

    def find_conflicts(
        self,
        tutor_id: str,
        student_id: str,
        at: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[AppointmentAggregate]:
        query = (
            self._active()
            .where(AppointmentRecord.status.in_(ACTIVE_STATUSES))
            .where(AppointmentRecord.appointment_date >= at - CONFLICT_WINDOW)
            .where(AppointmentRecord.appointment_date <= at + CONFLICT_WINDOW)
            .where(or_(AppointmentRecord.tutor_id == tutor_id, AppointmentRecord.student_id == student_id))
        )
        if exclude_id:
            query = query.where(AppointmentRecord.id != exclude_id)
        return [self._to_aggregate(r) for r in self.session.exec(query).all()]
