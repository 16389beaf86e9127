"""Tests for appending to the activity log and its append-only guard."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from lms_activity.application import log_writer
from lms_activity.application.log_writer import create_log, record_activity
from lms_activity.domain.events import LogEvent, LogType
from lms_activity.domain.exceptions import ImmutableLogError, PayloadMismatchError
from lms_activity.domain.payloads import (
    EVENT_PAYLOADS,
    CourseReference,
    NoReferences,
    UnitReference,
    UserReference,
)
from lms_activity.infrastructure.database.log_models import LogEntry
from lms_activity.infrastructure.database.models import User


def test_every_event_has_a_payload_shape():
    assert set(EVENT_PAYLOADS) == set(LogEvent)


def test_create_log_stores_references(session: Session, admin: User):
    entry = create_log(
        session,
        LogEvent.UNIT_DELETION,
        LogType.DELETE,
        admin.id,
        UnitReference(unit_id=7, course_id=3),
    )

    assert entry.id is not None
    assert entry.event == "UNIT_DELETION"
    assert entry.type == "DELETE"
    assert entry.actor_id == admin.id
    assert entry.unit_id == 7
    assert entry.course_id == 3
    assert entry.user_id is None
    assert entry.un_delete is False
    assert entry.payload == UnitReference(unit_id=7, course_id=3)


def test_create_log_without_actor(session: Session):
    entry = create_log(
        session, LogEvent.IMPORT_DATA, LogType.IMPORT, None, NoReferences()
    )
    assert entry.actor_id is None
    assert entry.payload == NoReferences()


def test_create_log_rejects_wrong_payload_variant(session: Session, admin: User):
    with pytest.raises(PayloadMismatchError):
        create_log(
            session,
            LogEvent.COURSE_DELETION,
            LogType.DELETE,
            admin.id,
            UserReference(user_id=admin.id),
        )

    assert session.exec(select(LogEntry)).all() == []


def test_unknown_stored_event_has_no_payload(session: Session):
    entry = LogEntry(event="LEGACY_EVENT", type="DELETE", course_id=1)
    session.add(entry)
    session.commit()
    session.refresh(entry)

    assert entry.known_event is None
    assert entry.payload is None


def test_record_activity_swallows_store_errors(
    session: Session, admin: User, monkeypatch: pytest.MonkeyPatch
):
    def failing_create_log(*args, **kwargs):
        raise OperationalError("INSERT INTO logs", {}, Exception("disk full"))

    monkeypatch.setattr(log_writer, "create_log", failing_create_log)

    result = record_activity(
        session,
        LogEvent.COURSE_CREATION,
        LogType.CREATE,
        admin.id,
        CourseReference(course_id=1),
    )
    assert result is None


def test_log_fields_cannot_be_rewritten(session: Session, admin: User):
    entry = create_log(
        session,
        LogEvent.COURSE_DELETION,
        LogType.DELETE,
        admin.id,
        CourseReference(course_id=1),
    )

    entry.event = LogEvent.COURSE_CREATION.value
    session.add(entry)
    with pytest.raises(ImmutableLogError):
        session.commit()
    session.rollback()

    entry.course_id = 2
    session.add(entry)
    with pytest.raises(ImmutableLogError):
        session.commit()
    session.rollback()

    session.refresh(entry)
    assert entry.event == "COURSE_DELETION"
    assert entry.course_id == 1


def test_un_delete_only_moves_forward(session: Session, admin: User):
    entry = create_log(
        session,
        LogEvent.COURSE_DELETION,
        LogType.DELETE,
        admin.id,
        CourseReference(course_id=1),
    )

    entry.un_delete = True
    session.add(entry)
    session.commit()

    entry.un_delete = False
    session.add(entry)
    with pytest.raises(ImmutableLogError):
        session.commit()
    session.rollback()

    session.refresh(entry)
    assert entry.un_delete is True
