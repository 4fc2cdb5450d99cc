from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.application.ports.appointments_repo import AppointmentFilters
from app.db.models import AppointmentRecord, User
from app.domain import AppointmentAggregate, AppointmentCreationData, AppointmentStatus, DuplicateAppointment
from app.infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from app.infrastructure.persistence.sqlalchemy.repositories.user_directory_sql import SqlUserDirectory

UTC = timezone.utc
TUESDAY_10AM = datetime(2026, 1, 6, 10, 0, tzinfo=UTC)


@pytest.fixture
def session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def repo(session):
    return SqlAppointmentsRepository(session)


def new_appointment(tutor_id="tutor-1", student_id="student-1", when=TUESDAY_10AM, **kwargs):
    return AppointmentAggregate.create(
        AppointmentCreationData(tutor_id=tutor_id, student_id=student_id, appointment_date=when, **kwargs)
    )


def test_save_and_load_round_trip(clock, repo):
    appt = new_appointment(checklist=[{"description": "Lab report", "completed": True}], reason="Chemistry")
    repo.save(appt)
    loaded = repo.get_by_id(appt.id.value)
    assert loaded == appt
    assert loaded.to_json() == appt.to_json()
    assert loaded.appointment_date.value.tzinfo is not None


def test_update_persists_changes(clock, repo):
    appt = repo.save(new_appointment())
    clock.advance(minutes=10)
    repo.update(appt.confirm_appointment())
    loaded = repo.get_by_id(appt.id.value)
    assert loaded.status is AppointmentStatus.CONFIRMED
    assert loaded.timestamps.updated_at == clock()


def test_update_of_unknown_row_returns_none(clock, repo):
    assert repo.update(new_appointment()) is None


def test_soft_deleted_rows_are_invisible(clock, repo, session):
    appt = repo.save(new_appointment())
    repo.update(appt.delete())
    assert repo.get_by_id(appt.id.value) is None
    assert repo.update(appt.confirm_appointment()) is None
    row = session.get(AppointmentRecord, appt.id.value)
    assert row is not None
    assert row.deleted_at is not None
    items, meta = repo.list(AppointmentFilters())
    assert items == []
    assert meta.total == 0


def test_list_filters_orders_and_paginates(clock, repo):
    for day in (6, 7, 8, 9):
        repo.save(new_appointment(when=datetime(2026, 1, day, 10, 0, tzinfo=UTC)))
    other = repo.save(new_appointment(tutor_id="tutor-2", student_id="student-2"))
    repo.update(other.confirm_appointment())

    items, meta = repo.list(AppointmentFilters(tutor_id="tutor-1", page=2, limit=3))
    assert [a.appointment_date.value.day for a in items] == [6]
    assert (meta.total, meta.total_pages, meta.has_next, meta.has_prev) == (4, 2, False, True)

    confirmed, _ = repo.list(AppointmentFilters(status=AppointmentStatus.CONFIRMED))
    assert [a.id for a in confirmed] == [other.id]

    window, meta = repo.list(
        AppointmentFilters(
            date_from=datetime(2026, 1, 7, 0, 0, tzinfo=UTC),
            date_to=datetime(2026, 1, 8, 23, 0, tzinfo=UTC),
            student_id="student-1",
        )
    )
    assert [a.appointment_date.value.day for a in window] == [8, 7]
    assert meta.total == 2


def test_find_conflicts_within_one_hour_for_either_party(clock, repo):
    booked = repo.save(new_appointment())
    assert repo.find_conflicts("tutor-1", "student-x", TUESDAY_10AM + timedelta(minutes=59)) == [booked]
    assert repo.find_conflicts("tutor-x", "student-1", TUESDAY_10AM - timedelta(minutes=30)) == [booked]
    assert repo.find_conflicts("tutor-x", "student-x", TUESDAY_10AM) == []
    assert repo.find_conflicts("tutor-1", "student-1", TUESDAY_10AM + timedelta(hours=2)) == []
    assert repo.find_conflicts("tutor-1", "student-1", TUESDAY_10AM, exclude_id=booked.id.value) == []


def test_closed_appointments_do_not_conflict(clock, repo):
    cancelled = repo.save(new_appointment())
    repo.update(cancelled.cancel_appointment())
    deleted = repo.save(new_appointment(tutor_id="tutor-2", student_id="student-2"))
    repo.update(deleted.delete())
    assert repo.find_conflicts("tutor-1", "student-2", TUESDAY_10AM) == []


def test_user_directory_returns_active_users_only(session):
    session.add(User(id="tutor-1", name="Tara", email="Tara@Example.com", role="tutor"))
    session.add(User(id="student-1", name="Sam", email="sam@example.com", role="student", is_active=False))
    session.add(User(id="broken-1", name="Bo", email="not-an-email", role="student"))
    session.commit()
    users = SqlUserDirectory(session)
    tutor = users.get_user("tutor-1")
    assert tutor.email.value == "tara@example.com"
    assert tutor.is_tutor()
    assert users.get_user("student-1") is None
    assert users.get_user("broken-1") is None
    assert users.get_user("nobody") is None


def test_exists_includes_soft_deleted_rows(clock, repo):
    appt = repo.save(new_appointment(id="appt-kept1"))
    assert repo.exists("appt-kept1")
    repo.update(appt.delete())
    assert repo.exists("appt-kept1")
    assert not repo.exists("appt-other")


def test_saving_a_taken_id_rolls_back_and_keeps_session_usable(clock, repo):
    repo.save(new_appointment(id="appt-twice"))
    with pytest.raises(DuplicateAppointment):
        repo.save(new_appointment(id="appt-twice", when=datetime(2026, 1, 7, 14, 0, tzinfo=UTC)))
    later = repo.save(new_appointment(when=datetime(2026, 1, 8, 10, 0, tzinfo=UTC)))
    assert repo.get_by_id(later.id.value) == later
    assert repo.get_by_id("appt-twice").appointment_date.value == TUESDAY_10AM


def test_users_get_timezone_aware_creation_time(session):
    user = User(id="tutor-9", name="Tia", email="tia@example.com", role="tutor")
    assert user.created_at.tzinfo is not None
    session.add(user)
    session.commit()
    assert SqlUserDirectory(session).get_user("tutor-9").name == "Tia"
