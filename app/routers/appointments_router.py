from functools import lru_cache
from typing import Optional
from fastapi import APIRouter, Depends, Query, status as http_status
from sqlmodel import Session
import logging
from datetime import datetime, timezone

from ..database import get_session
from ..domain import clock
from ..application.ports.appointments_repo import AppointmentFilters, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..application.ports.notifier import AppointmentNotifier
from ..application.services.appointments_service import AppointmentsService, parse_status_filter
from ..exceptions import create_success_response
from ..infrastructure.notifications import build_notifier
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_directory_sql import SqlUserDirectory
from ..schemas.appointments.appointment import (
    AppointmentComplete,
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentListEnvelope,
    AppointmentReschedule,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from ..schemas.common.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


@lru_cache()
def get_notifier() -> AppointmentNotifier:
    return build_notifier()


def get_appointments_service(
    session: Session = Depends(get_session),
    notifier: AppointmentNotifier = Depends(get_notifier),
) -> AppointmentsService:
    return AppointmentsService(
        repo=SqlAppointmentsRepository(session),
        notifier=notifier,
        users=SqlUserDirectory(session),
    )


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=clock.business_timezone())
    return value.astimezone(timezone.utc)


@router.post("/", response_model=AppointmentEnvelope, status_code=http_status.HTTP_201_CREATED)
def create_appointment(
    body: AppointmentCreate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.create(
        tutor_id=body.tutor_id,
        student_id=body.student_id,
        appointment_date=body.appointment_date,
        checklist=body.checklist_entries(),
        reason=body.reason,
        appointment_id=body.id,
    )
    return create_success_response(appt.to_json())


@router.get("/", response_model=AppointmentListEnvelope)
def list_appointments(
    tutor_id: Optional[str] = None,
    student_id: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    filters = AppointmentFilters(
        tutor_id=tutor_id,
        student_id=student_id,
        status=parse_status_filter(status),
        date_from=_to_utc(date_from),
        date_to=_to_utc(date_to),
        page=page,
        limit=limit,
    )
    items, pagination = appt_service.list(filters)
    return create_success_response([a.to_json() for a in items], pagination=pagination.__dict__)


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return create_success_response(appt_service.get(appointment_id).to_json())


@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.update(appointment_id, body.to_patch())
    return create_success_response(appt.to_json())


@router.patch("/{appointment_id}/status", response_model=AppointmentEnvelope)
def update_appointment_status(
    appointment_id: str,
    body: AppointmentStatusUpdate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.change_status(appointment_id, body.status)
    return create_success_response(appt.to_json())


@router.post("/{appointment_id}/reschedule", response_model=AppointmentEnvelope)
def reschedule_appointment(
    appointment_id: str,
    body: AppointmentReschedule,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.reschedule(appointment_id, body.appointment_date)
    return create_success_response(appt.to_json())


@router.post("/{appointment_id}/reopen", response_model=AppointmentEnvelope)
def reopen_appointment(
    appointment_id: str,
    body: AppointmentReschedule,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.reopen(appointment_id, body.appointment_date)
    return create_success_response(appt.to_json())


@router.post("/{appointment_id}/complete", response_model=AppointmentEnvelope)
def complete_appointment(
    appointment_id: str,
    body: Optional[AppointmentComplete] = None,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.complete(appointment_id, body.completed_task if body else None)
    return create_success_response(appt.to_json())


@router.delete("/{appointment_id}", response_model=AppointmentEnvelope)
def delete_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.delete(appointment_id)
    logger.info(f"Appointment {appointment_id} deleted via API")
    return create_success_response(appt.to_json())
