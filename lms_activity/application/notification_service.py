from typing import Final

from sqlmodel import Session

from ..domain.entities import EntityKind
from ..domain.events import LogEvent, LogType
from ..domain.payloads import NotificationReference
from ..infrastructure.database.models import Notification
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def create_notification(
    session: Session, name: str, actor_id: int | None
) -> Notification:
    validate_entity_name_with_logging(name, "notification")

    notification: Final = Notification(name=name.strip())
    session.add(notification)
    session.commit()
    session.refresh(notification)
    assert notification.id is not None

    log_database_operation(
        operation="create", table="notifications", notification_id=notification.id
    )
    record_activity(
        session,
        LogEvent.NOTIFICATION_CREATION,
        LogType.CREATE,
        actor_id,
        NotificationReference(notification_id=notification.id),
    )
    return notification


def update_notification(
    session: Session, notification_id: int, name: str, actor_id: int | None
) -> Notification:
    notification: Final = get_active(
        session, Notification, notification_id, EntityKind.NOTIFICATION
    )
    validate_entity_name_with_logging(name, "notification")
    notification.name = name.strip()

    session.add(notification)
    session.commit()
    session.refresh(notification)

    log_database_operation(
        operation="update", table="notifications", notification_id=notification_id
    )
    record_activity(
        session,
        LogEvent.NOTIFICATION_UPDATE,
        LogType.UPDATE,
        actor_id,
        NotificationReference(notification_id=notification_id),
    )
    return notification


def delete_notification(
    session: Session, notification_id: int, actor_id: int | None
) -> Notification:
    notification: Final = get_active(
        session, Notification, notification_id, EntityKind.NOTIFICATION
    )

    delete_directly(session, notification)
    session.commit()

    report_deletion(EntityKind.NOTIFICATION, notification_id)
    record_activity(
        session,
        LogEvent.NOTIFICATION_DELETION,
        LogType.DELETE,
        actor_id,
        NotificationReference(notification_id=notification_id),
    )
    return notification
