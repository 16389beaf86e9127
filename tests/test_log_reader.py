"""Tests for listing and rendering the activity log."""

from datetime import datetime, timedelta

from sqlmodel import Session, select

from lms_activity.application.course_service import create_course, delete_course
from lms_activity.application.group_service import add_user_to_group, create_group
from lms_activity.application.log_reader import (
    LogOrder,
    LogQuery,
    clean_logs,
    get_logs,
    list_events,
    list_types,
)
from lms_activity.application.log_writer import create_log
from lms_activity.application.undo_service import UndoOutcome, undo_event
from lms_activity.domain.events import LogEvent, LogType
from lms_activity.domain.payloads import CourseReference, NoReferences
from lms_activity.infrastructure.database.log_models import LogEntry
from lms_activity.infrastructure.database.models import User

NOW = datetime(2024, 5, 1, 12, 0, 0)


def _add_logs(session: Session, count: int, actor_id: int | None = None) -> None:
    for _ in range(count):
        create_log(
            session, LogEvent.USER_LOGIN, LogType.LOGIN, actor_id, NoReferences()
        )


def test_default_paging(session: Session, admin: User):
    _add_logs(session, 25, admin.id)

    page = get_logs(session, LogQuery(), admin.id, NOW)

    assert page.total_items == 25
    assert page.total_page == 2
    assert page.current_page == 1
    assert len(page.data) == 20
    ids = [item.id for item in page.data]
    assert ids == sorted(ids, reverse=True)


def test_page_below_one_reads_as_first_page(session: Session, admin: User):
    _add_logs(session, 3, admin.id)

    page = get_logs(session, LogQuery(page=0, row_per_page=2), admin.id, NOW)

    assert page.current_page == 1
    assert len(page.data) == 2


def test_out_of_range_page_size_is_capped(session: Session, admin: User):
    _add_logs(session, 3, admin.id)

    assert LogQuery(row_per_page=500).effective_limit == 200
    assert LogQuery(row_per_page=0).effective_limit == 200
    page = get_logs(session, LogQuery(row_per_page=500), admin.id, NOW)
    assert page.total_page == 1
    assert len(page.data) == 3


def test_last_page(session: Session, admin: User):
    _add_logs(session, 5, admin.id)

    page = get_logs(
        session,
        LogQuery(page=3, row_per_page=2, order=LogOrder.ASC),
        admin.id,
        NOW,
    )

    assert page.total_page == 3
    assert [item.id for item in page.data] == [5]


def test_empty_log(session: Session, admin: User):
    page = get_logs(session, LogQuery(), admin.id, NOW)

    assert page.data == []
    assert page.total_items == 0
    assert page.total_page == 0


def test_filters_combine(session: Session, admin: User, learner: User):
    biology = create_course(session, "Biology", admin.id)
    chemistry = create_course(session, "Chemistry", learner.id)
    delete_course(session, biology.id, admin.id)
    _add_logs(session, 2, learner.id)

    by_course = get_logs(session, LogQuery(course=biology.id), admin.id, NOW)
    assert {item.event for item in by_course.data} == {
        "COURSE_CREATION",
        "COURSE_DELETION",
    }

    by_actor_and_type = get_logs(
        session, LogQuery(user=learner.id, type="CREATE"), admin.id, NOW
    )
    assert by_actor_and_type.total_items == 1
    assert by_actor_and_type.data[0].event == "COURSE_CREATION"

    by_event = get_logs(session, LogQuery(event="USER_LOGIN"), admin.id, NOW)
    assert by_event.total_items == 2

    by_intake = get_logs(
        session, LogQuery(course=biology.id, intake=chemistry.id), admin.id, NOW
    )
    assert by_intake.total_items == 1

    group = create_group(session, "Morning cohort", admin.id)
    add_user_to_group(session, group.id, learner.id, admin.id)
    by_group = get_logs(session, LogQuery(group=group.id), admin.id, NOW)
    assert {item.event for item in by_group.data} == {
        "GROUP_USER_CREATION",
        "ADD_USER_TO_GROUP",
    }
    by_group_and_actor = get_logs(
        session, LogQuery(group=group.id, user=learner.id), admin.id, NOW
    )
    assert by_group_and_actor.total_items == 0


def test_date_range_filter(session: Session, admin: User):
    for days_ago in (10, 5, 1):
        entry = LogEntry(
            event=LogEvent.USER_LOGIN.value,
            type=LogType.LOGIN.value,
            actor_id=admin.id,
            created_at=NOW - timedelta(days=days_ago),
        )
        session.add(entry)
    session.commit()

    since = get_logs(
        session, LogQuery(from_=NOW - timedelta(days=6)), admin.id, NOW
    )
    assert since.total_items == 2

    window = get_logs(
        session,
        LogQuery(from_=NOW - timedelta(days=6), to=NOW - timedelta(days=2)),
        admin.id,
        NOW,
    )
    assert window.total_items == 1
    assert window.data[0].description == (
        "<strong>You</strong> signed in - <span>5 days ago</span>"
    )


def test_query_accepts_camel_case_aliases():
    query = LogQuery.model_validate({"rowPerPage": 5, "from": "2024-05-01T00:00:00Z"})
    assert query.row_per_page == 5
    assert query.from_ == datetime(2024, 5, 1, 0, 0, 0)


def test_undo_action_only_on_undoable_deletions(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    delete_course(session, course.id, admin.id)
    create_log(session, LogEvent.USER_LOGIN, LogType.LOGIN, admin.id, NoReferences())
    legacy = LogEntry(event="LEGACY_DELETION", type="DELETE")
    session.add(legacy)
    session.commit()

    page = get_logs(session, LogQuery(), admin.id, NOW)
    actions = {item.event: item.action for item in page.data}

    assert actions["COURSE_DELETION"] == ["UNDO"]
    assert actions["COURSE_CREATION"] == []
    assert actions["USER_LOGIN"] == []
    assert actions["LEGACY_DELETION"] == []


def test_unknown_event_does_not_break_the_page(session: Session, admin: User):
    _add_logs(session, 1, admin.id)
    legacy = LogEntry(event="LEGACY_EVENT", type="UPDATE", actor_id=admin.id)
    session.add(legacy)
    session.commit()
    _add_logs(session, 1, admin.id)

    page = get_logs(session, LogQuery(), admin.id, NOW)

    assert page.total_items == 3
    descriptions = {item.event: item.description for item in page.data}
    assert descriptions["LEGACY_EVENT"] is None
    assert descriptions["USER_LOGIN"] is not None


def test_other_actors_are_named(session: Session, admin: User, learner: User):
    create_log(
        session, LogEvent.USER_LOGIN, LogType.LOGIN, learner.id, NoReferences()
    )
    create_log(session, LogEvent.EXPORT_DATA, LogType.EXPORT, None, NoReferences())

    page = get_logs(session, LogQuery(order=LogOrder.ASC), admin.id)

    assert page.data[0].description is not None
    assert page.data[0].description.startswith("<strong>Lena Learner</strong>")
    assert page.data[1].description is not None
    assert page.data[1].description.startswith("<strong>System</strong>")


def test_create_delete_list_undo_scenario(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id, code="BIO-1")
    delete_course(session, course.id, admin.id)

    page = get_logs(session, LogQuery(course=course.id), admin.id, NOW)
    deletion = page.data[0]
    assert deletion.event == "COURSE_DELETION"
    assert deletion.action == ["UNDO"]
    assert deletion.description is not None
    assert deletion.description.startswith(
        "<strong>You</strong> deleted the course <strong>Biology</strong> (BIO-1)"
    )

    assert undo_event(session, deletion.id, admin.id) == UndoOutcome.RESTORED

    page = get_logs(session, LogQuery(course=course.id), admin.id, NOW)
    assert [item.event for item in page.data] == [
        "UNDELETE_COURSE",
        "COURSE_DELETION",
        "COURSE_CREATION",
    ]
    assert page.data[1].un_delete is True
    assert page.data[1].action == []


def test_catalogues():
    assert "COURSE_DELETION" in list_events()
    assert len(list_events()) == len(LogEvent)
    assert list_types()[:4] == ["CREATE", "UPDATE", "DELETE", "UNDELETE"]


def test_clean_logs(session: Session, admin: User):
    _add_logs(session, 4, admin.id)
    create_log(
        session,
        LogEvent.COURSE_CREATION,
        LogType.CREATE,
        admin.id,
        CourseReference(course_id=1),
    )

    assert clean_logs(session) == 5
    assert session.exec(select(LogEntry)).all() == []
    assert clean_logs(session) == 0
