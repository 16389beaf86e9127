from typing import Final

from sqlmodel import Session, col

from ..domain.entities import EntityKind, EntityStatus
from ..domain.events import LogEvent, LogType
from ..domain.payloads import UnitReference
from ..infrastructure.database.models import SessionUser, Unit, UserEvent
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .cascade import cascade_delete
from .course_service import get_course
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def get_unit(session: Session, unit_id: int) -> Unit:
    return get_active(session, Unit, unit_id, EntityKind.UNIT)


def create_unit(
    session: Session,
    course_id: int,
    title: str,
    actor_id: int | None,
    draft: bool = False,
) -> Unit:
    validate_entity_name_with_logging(title, "unit")
    get_course(session, course_id)

    unit: Final = Unit(
        title=title.strip(),
        course_id=course_id,
        status=EntityStatus.DRAFT if draft else EntityStatus.ACTIVE,
    )
    session.add(unit)
    session.commit()
    session.refresh(unit)
    assert unit.id is not None

    log_database_operation(
        operation="create", table="units", unit_id=unit.id, course_id=course_id
    )
    record_activity(
        session,
        LogEvent.UNIT_CREATION,
        LogType.CREATE,
        actor_id,
        UnitReference(unit_id=unit.id, course_id=course_id),
    )
    return unit


def update_unit(
    session: Session,
    unit_id: int,
    actor_id: int | None,
    title: str | None = None,
    publish: bool = False,
) -> Unit:
    """Rename a unit and/or move it out of DRAFT."""
    unit: Final = get_unit(session, unit_id)

    if title is not None:
        validate_entity_name_with_logging(title, "unit")
        unit.title = title.strip()
    if publish and unit.status == EntityStatus.DRAFT:
        unit.status = EntityStatus.ACTIVE

    session.add(unit)
    session.commit()
    session.refresh(unit)

    log_database_operation(operation="update", table="units", unit_id=unit_id)
    record_activity(
        session,
        LogEvent.UNIT_UPDATE,
        LogType.UPDATE,
        actor_id,
        UnitReference(unit_id=unit_id, course_id=unit.course_id),
    )
    return unit


def delete_unit(session: Session, unit_id: int, actor_id: int | None) -> Unit:
    """Soft delete a unit with its ACTIVE attendances and events."""
    logger.debug("Soft deleting unit", unit_id=unit_id)

    unit: Final = get_unit(session, unit_id)
    course_id = unit.course_id

    delete_directly(session, unit)
    cascaded = cascade_delete(
        session,
        SessionUser,
        EntityKind.UNIT,
        unit_id,
        col(SessionUser.unit_id) == unit_id,
    )
    cascaded += cascade_delete(
        session, UserEvent, EntityKind.UNIT, unit_id, col(UserEvent.unit_id) == unit_id
    )
    session.commit()

    report_deletion(EntityKind.UNIT, unit_id, cascaded, course_id=course_id)
    record_activity(
        session,
        LogEvent.UNIT_DELETION,
        LogType.DELETE,
        actor_id,
        UnitReference(unit_id=unit_id, course_id=course_id),
    )
    return unit
