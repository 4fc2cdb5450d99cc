# app/db/models/scheduling/appointment.py
from typing import Any, Dict, List, Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, DateTime, Index
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentRecord(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_tutor_date", "tutor_id", "appointment_date"),
        Index("idx_appointments_student_date", "student_id", "appointment_date"),
        Index("idx_appointments_status_date", "status", "appointment_date"),
        Index("idx_appointments_deleted_date", "deleted_at", "appointment_date"),
    )

    id: str = Field(primary_key=True, max_length=64)
    tutor_id: str = Field(index=True, max_length=64)
    student_id: str = Field(index=True, max_length=64)
    status: str = Field(default="pending", index=True, max_length=20)
    appointment_date: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    checklist: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    reason: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
