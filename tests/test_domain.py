import pytest
from sqlmodel import Session

from lms_activity.application.cascade import cascade_delete, cascade_restore
from lms_activity.domain.entities import (
    DeletionMark,
    DeletionOrigin,
    EntityKind,
    EntityStatus,
    validate_entity_name,
)
from lms_activity.domain.events import LogEvent
from lms_activity.domain.exceptions import ValidationError
from lms_activity.domain.payloads import CourseReference, UnitReference, check_payload
from lms_activity.infrastructure.database.models import Course, Unit


def test_deletion_mark_constructors():
    direct = DeletionMark.direct()
    cascade = DeletionMark.cascaded_from(EntityKind.COURSE, 3)

    assert direct.origin == DeletionOrigin.DIRECT
    assert not direct.is_cascade
    assert cascade.is_cascade
    assert cascade == DeletionMark(DeletionOrigin.CASCADE, EntityKind.COURSE, 3)
    assert cascade != DeletionMark.cascaded_from(EntityKind.UNIT, 3)


def test_deletion_mark_rejects_inconsistent_parents():
    with pytest.raises(ValidationError):
        DeletionMark(DeletionOrigin.CASCADE)
    with pytest.raises(ValidationError):
        DeletionMark(DeletionOrigin.DIRECT, EntityKind.COURSE, 1)


def test_event_lookup():
    assert LogEvent.lookup("COURSE_DELETION") is LogEvent.COURSE_DELETION
    assert LogEvent.lookup("LEGACY_EVENT") is None


def test_check_payload():
    check_payload(LogEvent.UNIT_DELETION, UnitReference(unit_id=1, course_id=2))
    with pytest.raises(ValidationError):
        check_payload(LogEvent.UNIT_DELETION, CourseReference(course_id=2))


@pytest.mark.parametrize("name", ["", "   ", "tab\there", "x" * 201])
def test_invalid_names(name: str):
    with pytest.raises(ValidationError):
        validate_entity_name(name, "course")


def test_cascade_restore_only_touches_its_parent(session: Session):
    course = Course(name="Biology")
    other = Course(name="Chemistry")
    session.add(course)
    session.add(other)
    session.commit()
    assert course.id is not None and other.id is not None

    cascaded = Unit(title="Cells", course_id=course.id)
    direct = Unit(title="Genes", course_id=course.id)
    foreign = Unit(title="Atoms", course_id=other.id)
    for unit in (cascaded, direct, foreign):
        session.add(unit)
    session.commit()

    direct.mark_deleted(DeletionMark.direct())
    foreign.mark_deleted(DeletionMark.cascaded_from(EntityKind.COURSE, other.id))
    session.add(direct)
    session.add(foreign)
    marked = cascade_delete(
        session, Unit, EntityKind.COURSE, course.id, Unit.course_id == course.id
    )
    session.commit()
    assert marked == 1

    restored = cascade_restore(session, Unit, EntityKind.COURSE, course.id)
    session.commit()

    assert restored == 1
    for unit in (cascaded, direct, foreign):
        session.refresh(unit)
    assert cascaded.status == EntityStatus.ACTIVE
    assert direct.status == EntityStatus.DELETED
    assert foreign.status == EntityStatus.DELETED
