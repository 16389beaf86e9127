from typing import Final

from sqlmodel import Session, col, select

from ..domain.entities import EntityKind
from ..domain.events import LogEvent, LogType
from ..domain.payloads import CourseReference
from ..infrastructure.database.models import Course, SessionUser, Unit, UserEvent
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .cascade import cascade_delete
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def _event_for(
    course: Course, course_event: LogEvent, intake_event: LogEvent
) -> LogEvent:
    return intake_event if course.is_intake else course_event


def get_course(session: Session, course_id: int) -> Course:
    return get_active(session, Course, course_id, EntityKind.COURSE)


def create_course(
    session: Session,
    name: str,
    actor_id: int | None,
    code: str | None = None,
    parent_id: int | None = None,
) -> Course:
    """Create a course, or an intake of the course `parent_id`."""
    logger.debug("Creating course", course_name=name, parent_id=parent_id)
    validate_entity_name_with_logging(name, "course")
    if parent_id is not None:
        get_course(session, parent_id)

    course: Final = Course(name=name.strip(), code=code, parent_id=parent_id)
    session.add(course)
    session.commit()
    session.refresh(course)
    assert course.id is not None

    log_database_operation(
        operation="create", table="courses", course_id=course.id, code=code
    )
    record_activity(
        session,
        _event_for(course, LogEvent.COURSE_CREATION, LogEvent.INTAKE_CREATION),
        LogType.CREATE,
        actor_id,
        CourseReference(course_id=course.id),
    )
    logger.info("Course created", course_id=course.id, intake=course.is_intake)
    return course


def update_course(
    session: Session,
    course_id: int,
    actor_id: int | None,
    name: str | None = None,
    code: str | None = None,
) -> Course:
    course: Final = get_course(session, course_id)

    if name is not None:
        validate_entity_name_with_logging(name, "course")
        course.name = name.strip()
    if code is not None:
        course.code = code

    session.add(course)
    session.commit()
    session.refresh(course)

    log_database_operation(operation="update", table="courses", course_id=course_id)
    record_activity(
        session,
        _event_for(course, LogEvent.COURSE_UPDATE, LogEvent.INTAKE_UPDATE),
        LogType.UPDATE,
        actor_id,
        CourseReference(course_id=course_id),
    )
    return course


def delete_course(session: Session, course_id: int, actor_id: int | None) -> Course:
    """Soft delete a course or intake with its units and their sessions.

    The code is released for reuse and kept in `old_code`. Units of the
    course, and the attendances and events of those units, that are still
    ACTIVE are deleted along with it.

    Raises:
        EntityNotFoundError: If the course does not exist or is already deleted
    """
    logger.debug("Soft deleting course", course_id=course_id)

    course: Final = get_course(session, course_id)
    is_intake = course.is_intake

    delete_directly(session, course)
    if course.code is not None:
        course.old_code = course.code
        course.code = None

    unit_ids = session.exec(
        select(Unit.id).where(col(Unit.course_id) == course_id)
    ).all()

    cascaded = cascade_delete(
        session, Unit, EntityKind.COURSE, course_id, col(Unit.course_id) == course_id
    )
    if unit_ids:
        cascaded += cascade_delete(
            session,
            SessionUser,
            EntityKind.COURSE,
            course_id,
            col(SessionUser.unit_id).in_(unit_ids),
        )
        cascaded += cascade_delete(
            session,
            UserEvent,
            EntityKind.COURSE,
            course_id,
            col(UserEvent.unit_id).in_(unit_ids),
        )

    session.commit()

    report_deletion(EntityKind.COURSE, course_id, cascaded, intake=is_intake)
    record_activity(
        session,
        LogEvent.INTAKE_DELETION if is_intake else LogEvent.COURSE_DELETION,
        LogType.DELETE,
        actor_id,
        CourseReference(course_id=course_id),
    )
    return course
