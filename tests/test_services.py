"""Tests for the entity services: soft deletes, cascades and the logs they record."""

import pytest
from sqlmodel import Session, col, select

from lms_activity.application.course_service import (
    create_course,
    delete_course,
    update_course,
)
from lms_activity.application.discussion_service import (
    create_discussion,
    delete_discussion,
    update_discussion,
)
from lms_activity.application.event_service import (
    add_user_to_event,
    create_event,
    delete_event,
    remove_user_from_event,
    update_event,
)
from lms_activity.application.group_service import (
    add_user_to_group,
    create_group,
    delete_group,
    remove_user_from_group,
    update_group,
)
from lms_activity.application.notification_service import (
    create_notification,
    delete_notification,
    update_notification,
)
from lms_activity.application.unit_service import (
    create_unit,
    delete_unit,
    update_unit,
)
from lms_activity.application.user_service import (
    create_user,
    delete_user,
    permanently_delete_user,
    record_login,
    update_user,
)
from lms_activity.domain.entities import DeletionMark, EntityKind, EntityStatus
from lms_activity.domain.exceptions import EntityNotFoundError, ValidationError
from lms_activity.infrastructure.database.log_models import LogEntry
from lms_activity.infrastructure.database.models import User


def _events(session: Session) -> list[str]:
    entries = session.exec(select(LogEntry).order_by(col(LogEntry.id))).all()
    return [entry.event for entry in entries]


def test_create_course_logs_creation(session: Session, admin: User):
    course = create_course(session, "  Biology ", admin.id, code="BIO-1")

    assert course.name == "Biology"
    assert course.status == EntityStatus.ACTIVE
    entry = session.exec(select(LogEntry)).one()
    assert entry.event == "COURSE_CREATION"
    assert entry.type == "CREATE"
    assert entry.course_id == course.id
    assert entry.actor_id == admin.id


def test_intake_events_follow_parent(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    intake = create_course(session, "Biology 2024", admin.id, parent_id=course.id)
    update_course(session, intake.id, admin.id, name="Biology Spring 2024")
    delete_course(session, intake.id, admin.id)

    assert _events(session) == [
        "COURSE_CREATION",
        "INTAKE_CREATION",
        "INTAKE_UPDATE",
        "INTAKE_DELETION",
    ]


def test_create_course_rejects_invalid_name(session: Session, admin: User):
    with pytest.raises(ValidationError):
        create_course(session, "   ", admin.id)
    with pytest.raises(ValidationError):
        create_course(session, "Bio\nlogy", admin.id)
    assert _events(session) == []


def test_delete_course_cascades_to_units_and_sessions(
    session: Session, admin: User, learner: User
):
    course = create_course(session, "Biology", admin.id, code="BIO-1")
    unit = create_unit(session, course.id, "Cells", admin.id)
    lab = create_event(session, "Lab day", admin.id, unit_id=unit.id)
    attendance = add_user_to_event(session, lab.id, learner.id, admin.id)
    other_course = create_course(session, "Chemistry", admin.id)
    other_unit = create_unit(session, other_course.id, "Atoms", admin.id)

    delete_course(session, course.id, admin.id)

    cascade = DeletionMark.cascaded_from(EntityKind.COURSE, course.id)
    for record in (course, unit, lab, attendance, other_unit):
        session.refresh(record)
    assert course.is_deleted_by(DeletionMark.direct())
    assert course.code is None
    assert course.old_code == "BIO-1"
    assert unit.is_deleted_by(cascade)
    assert lab.is_deleted_by(cascade)
    assert attendance.is_deleted_by(cascade)
    assert other_unit.status == EntityStatus.ACTIVE

    entry = session.exec(
        select(LogEntry).where(LogEntry.event == "COURSE_DELETION")
    ).one()
    assert entry.type == "DELETE"
    assert entry.course_id == course.id


def test_delete_course_leaves_earlier_deletions_alone(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    unit = create_unit(session, course.id, "Cells", admin.id)
    delete_unit(session, unit.id, admin.id)

    delete_course(session, course.id, admin.id)

    session.refresh(unit)
    assert unit.is_deleted_by(DeletionMark.direct())


def test_delete_twice_is_not_found(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    delete_course(session, course.id, admin.id)

    with pytest.raises(EntityNotFoundError):
        delete_course(session, course.id, admin.id)


def test_delete_unit_logs_unit_and_course(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    unit = create_unit(session, course.id, "Cells", admin.id)

    delete_unit(session, unit.id, admin.id)

    entry = session.exec(
        select(LogEntry).where(LogEntry.event == "UNIT_DELETION")
    ).one()
    assert entry.unit_id == unit.id
    assert entry.course_id == course.id


def test_delete_group_cascades_to_memberships(
    session: Session, admin: User, learner: User
):
    group = create_group(session, "Morning cohort", admin.id)
    membership = add_user_to_group(session, group.id, learner.id, admin.id)

    delete_group(session, group.id, admin.id)

    session.refresh(membership)
    assert membership.is_deleted_by(
        DeletionMark.cascaded_from(EntityKind.GROUP, group.id)
    )
    assert _events(session) == [
        "GROUP_USER_CREATION",
        "ADD_USER_TO_GROUP",
        "GROUP_USER_DELETION",
    ]


def test_group_membership_add_and_remove(
    session: Session, admin: User, learner: User
):
    group = create_group(session, "Morning cohort", admin.id)
    first = add_user_to_group(session, group.id, learner.id, admin.id)
    second = add_user_to_group(session, group.id, learner.id, admin.id)
    assert first.id == second.id

    assert remove_user_from_group(session, group.id, learner.id, admin.id) is True
    assert remove_user_from_group(session, group.id, learner.id, admin.id) is False

    entry = session.exec(
        select(LogEntry).where(LogEntry.event == "REMOVE_USER_FROM_GROUP")
    ).one()
    assert entry.type == "REMOVE"
    assert entry.user_id == learner.id
    assert entry.group_id == group.id


def test_delete_event_cascades_to_attendees(
    session: Session, admin: User, learner: User
):
    lab = create_event(session, "Lab day", admin.id)
    attendance = add_user_to_event(session, lab.id, learner.id, admin.id)

    delete_event(session, lab.id, admin.id)

    session.refresh(attendance)
    assert attendance.is_deleted_by(
        DeletionMark.cascaded_from(EntityKind.EVENT, lab.id)
    )


def test_remove_user_from_event(session: Session, admin: User, learner: User):
    lab = create_event(session, "Lab day", admin.id)
    add_user_to_event(session, lab.id, learner.id, admin.id)

    assert remove_user_from_event(session, lab.id, learner.id, admin.id) is True
    assert remove_user_from_event(session, lab.id, learner.id, admin.id) is False
    assert _events(session)[-1] == "REMOVE_USER_FROM_EVENT"


def test_user_lifecycle_logs(session: Session, admin: User):
    user = create_user(session, "Lena Learner", admin.id, email="lena@example.com")
    update_user(session, user.id, admin.id, full_name="Lena L.")
    record_login(session, user.id)
    delete_user(session, user.id, admin.id)

    assert _events(session) == [
        "USER_REGISTER",
        "USER_UPDATE",
        "USER_LOGIN",
        "USER_DELETION",
    ]
    login = session.exec(
        select(LogEntry).where(LogEntry.event == "USER_LOGIN")
    ).one()
    assert login.actor_id == user.id
    assert login.type == "LOGIN"


def test_permanent_delete_anonymizes(session: Session, admin: User, learner: User):
    permanently_delete_user(session, learner.id, admin.id)

    session.refresh(learner)
    assert learner.status == EntityStatus.DELETED
    assert learner.anonymized is True
    assert learner.email is None
    assert learner.username is None
    assert learner.old_email == "lena@example.com"
    assert learner.old_username == "lena"
    assert _events(session) == ["USER_DELETION"]


def test_discussion_and_notification_deletes_are_direct(
    session: Session, admin: User
):
    discussion = create_discussion(session, "Questions", admin.id)
    notification = create_notification(session, "Exam dates", admin.id)

    delete_discussion(session, discussion.id, admin.id)
    delete_notification(session, notification.id, admin.id)

    session.refresh(discussion)
    session.refresh(notification)
    assert discussion.is_deleted_by(DeletionMark.direct())
    assert notification.is_deleted_by(DeletionMark.direct())
    assert _events(session)[-2:] == ["DISCUSSION_DELETION", "NOTIFICATION_DELETION"]


def test_update_operations_log_update_events(session: Session, admin: User):
    course = create_course(session, "Biology", admin.id)
    unit = create_unit(session, course.id, "Cells", admin.id, draft=True)
    group = create_group(session, "Morning cohort", admin.id)
    lab = create_event(session, "Lab day", admin.id)
    discussion = create_discussion(session, "Questions", admin.id)
    notification = create_notification(session, "Exam dates", admin.id)
    created = len(_events(session))

    update_unit(session, unit.id, admin.id, title="Living cells", publish=True)
    update_group(session, group.id, "Evening cohort", admin.id)
    update_event(session, lab.id, "Field trip", admin.id)
    update_discussion(session, discussion.id, "Open questions", admin.id)
    update_notification(session, notification.id, "Exam schedule", admin.id)

    assert unit.title == "Living cells"
    assert unit.status == EntityStatus.ACTIVE
    assert group.name == "Evening cohort"
    assert _events(session)[created:] == [
        "UNIT_UPDATE",
        "GROUP_USER_UPDATE",
        "EVENT_UPDATE",
        "DISCUSSION_UPDATE",
        "NOTIFICATION_UPDATE",
    ]


def test_update_of_deleted_entity_is_not_found(session: Session, admin: User):
    group = create_group(session, "Morning cohort", admin.id)
    delete_group(session, group.id, admin.id)

    with pytest.raises(EntityNotFoundError):
        update_group(session, group.id, "Evening cohort", admin.id)


def test_permanent_delete_purges_soft_deleted_user(
    session: Session, admin: User, learner: User
):
    delete_user(session, learner.id, admin.id)

    permanently_delete_user(session, learner.id, admin.id)

    session.refresh(learner)
    assert learner.anonymized is True
    assert learner.email is None
    assert learner.old_email == "lena@example.com"
    assert _events(session) == ["USER_DELETION", "USER_DELETION"]


def test_permanent_delete_of_anonymized_or_missing_user(
    session: Session, admin: User, learner: User
):
    permanently_delete_user(session, learner.id, admin.id)

    with pytest.raises(EntityNotFoundError):
        permanently_delete_user(session, learner.id, admin.id)
    with pytest.raises(EntityNotFoundError):
        permanently_delete_user(session, 4242, admin.id)
    assert _events(session) == ["USER_DELETION"]
