from typing import Final

from sqlmodel import Session, col, select

from ..domain.entities import EntityKind, EntityStatus
from ..domain.events import LogEvent, LogType
from ..domain.payloads import EventAttendanceReference, EventReference
from ..infrastructure.database.models import SessionUser, User, UserEvent
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .cascade import cascade_delete
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .unit_service import get_unit
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def get_event(session: Session, event_id: int) -> UserEvent:
    return get_active(session, UserEvent, event_id, EntityKind.EVENT)


def _active_attendance(
    session: Session, event_id: int, user_id: int
) -> SessionUser | None:
    statement: Final = select(SessionUser).where(
        col(SessionUser.user_event_id) == event_id,
        col(SessionUser.user_id) == user_id,
        col(SessionUser.status) == EntityStatus.ACTIVE,
    )
    return session.exec(statement).first()


def create_event(
    session: Session, name: str, actor_id: int | None, unit_id: int | None = None
) -> UserEvent:
    validate_entity_name_with_logging(name, "event")
    if unit_id is not None:
        get_unit(session, unit_id)

    user_event: Final = UserEvent(name=name.strip(), unit_id=unit_id)
    session.add(user_event)
    session.commit()
    session.refresh(user_event)
    assert user_event.id is not None

    log_database_operation(
        operation="create", table="user_events", event_id=user_event.id
    )
    record_activity(
        session,
        LogEvent.EVENT_CREATION,
        LogType.CREATE,
        actor_id,
        EventReference(user_event_id=user_event.id),
    )
    return user_event


def update_event(
    session: Session, event_id: int, name: str, actor_id: int | None
) -> UserEvent:
    user_event: Final = get_event(session, event_id)
    validate_entity_name_with_logging(name, "event")
    user_event.name = name.strip()

    session.add(user_event)
    session.commit()
    session.refresh(user_event)

    log_database_operation(operation="update", table="user_events", event_id=event_id)
    record_activity(
        session,
        LogEvent.EVENT_UPDATE,
        LogType.UPDATE,
        actor_id,
        EventReference(user_event_id=event_id),
    )
    return user_event


def delete_event(session: Session, event_id: int, actor_id: int | None) -> UserEvent:
    """Soft delete an event together with its ACTIVE attendances."""
    user_event: Final = get_event(session, event_id)

    delete_directly(session, user_event)
    cascaded = cascade_delete(
        session,
        SessionUser,
        EntityKind.EVENT,
        event_id,
        col(SessionUser.user_event_id) == event_id,
    )
    session.commit()

    report_deletion(EntityKind.EVENT, event_id, cascaded)
    record_activity(
        session,
        LogEvent.EVENT_DELETION,
        LogType.DELETE,
        actor_id,
        EventReference(user_event_id=event_id),
    )
    return user_event


def add_user_to_event(
    session: Session, event_id: int, user_id: int, actor_id: int | None
) -> SessionUser:
    """Register an attendee; an existing ACTIVE attendance is returned unchanged."""
    user_event: Final = get_event(session, event_id)
    get_active(session, User, user_id, EntityKind.USER)

    existing = _active_attendance(session, event_id, user_id)
    if existing is not None:
        logger.debug("User already attends event", event_id=event_id, user_id=user_id)
        return existing

    attendance: Final = SessionUser(
        user_id=user_id, user_event_id=event_id, unit_id=user_event.unit_id
    )
    session.add(attendance)
    session.commit()
    session.refresh(attendance)

    log_database_operation(
        operation="create",
        table="session_users",
        event_id=event_id,
        user_id=user_id,
    )
    record_activity(
        session,
        LogEvent.ADD_USER_TO_EVENT,
        LogType.ADD,
        actor_id,
        EventAttendanceReference(user_id=user_id, user_event_id=event_id),
    )
    return attendance


def remove_user_from_event(
    session: Session, event_id: int, user_id: int, actor_id: int | None
) -> bool:
    """Remove an attendee.

    Returns:
        True if an attendance was removed, False if the user did not attend
    """
    attendance = _active_attendance(session, event_id, user_id)
    if attendance is None:
        logger.warning(
            "Attendance removal failed - not attending",
            event_id=event_id,
            user_id=user_id,
        )
        return False

    delete_directly(session, attendance)
    session.commit()

    report_deletion(EntityKind.SESSION_USER, attendance.id, event_id=event_id)
    record_activity(
        session,
        LogEvent.REMOVE_USER_FROM_EVENT,
        LogType.REMOVE,
        actor_id,
        EventAttendanceReference(user_id=user_id, user_event_id=event_id),
    )
    return True
