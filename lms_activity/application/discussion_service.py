from typing import Final

from sqlmodel import Session

from ..domain.entities import EntityKind
from ..domain.events import LogEvent, LogType
from ..domain.payloads import DiscussionReference
from ..infrastructure.database.models import Discussion
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def create_discussion(
    session: Session, name: str, actor_id: int | None, course_id: int | None = None
) -> Discussion:
    validate_entity_name_with_logging(name, "discussion")

    discussion: Final = Discussion(name=name.strip(), course_id=course_id)
    session.add(discussion)
    session.commit()
    session.refresh(discussion)
    assert discussion.id is not None

    log_database_operation(
        operation="create", table="discussions", discussion_id=discussion.id
    )
    record_activity(
        session,
        LogEvent.DISCUSSION_CREATION,
        LogType.CREATE,
        actor_id,
        DiscussionReference(discussion_id=discussion.id),
    )
    return discussion


def update_discussion(
    session: Session, discussion_id: int, name: str, actor_id: int | None
) -> Discussion:
    discussion: Final = get_active(
        session, Discussion, discussion_id, EntityKind.DISCUSSION
    )
    validate_entity_name_with_logging(name, "discussion")
    discussion.name = name.strip()

    session.add(discussion)
    session.commit()
    session.refresh(discussion)

    log_database_operation(
        operation="update", table="discussions", discussion_id=discussion_id
    )
    record_activity(
        session,
        LogEvent.DISCUSSION_UPDATE,
        LogType.UPDATE,
        actor_id,
        DiscussionReference(discussion_id=discussion_id),
    )
    return discussion


def delete_discussion(
    session: Session, discussion_id: int, actor_id: int | None
) -> Discussion:
    discussion: Final = get_active(
        session, Discussion, discussion_id, EntityKind.DISCUSSION
    )

    delete_directly(session, discussion)
    session.commit()

    report_deletion(EntityKind.DISCUSSION, discussion_id)
    record_activity(
        session,
        LogEvent.DISCUSSION_DELETION,
        LogType.DELETE,
        actor_id,
        DiscussionReference(discussion_id=discussion_id),
    )
    return discussion
