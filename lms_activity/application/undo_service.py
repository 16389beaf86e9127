"""Undo of logged deletions.

Each undoable deletion event maps to an `UndoHandler` in `UNDO_HANDLERS`.
A handler loads the deleted record named by the log entry, checks that it is
still deleted on its own account, and restores it together with every
dependent that was deleted because of it. The restore, the UNDELETE log entry
and the `un_delete` flag on the deletion entry commit together or not at all.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar, Final

from sqlmodel import Session, col, select

from ..domain.entities import DeletionMark, EntityKind, EntityStatus
from ..domain.events import LogEvent, LogType
from ..domain.exceptions import EntityNotFoundError, LogNotFoundError
from ..domain.payloads import (
    CourseReference,
    DiscussionReference,
    EventReference,
    GroupReference,
    LogPayload,
    NotificationReference,
    UnitReference,
    UserReference,
)
from ..infrastructure.database.log_models import LogEntry
from ..infrastructure.database.models import (
    Course,
    CourseGroup,
    Discussion,
    Notification,
    SessionUser,
    SoftDeleteFields,
    Unit,
    User,
    UserCourseGroup,
    UserEvent,
)
from ..logging_config import get_logger
from ..logging_utils import log_database_operation, log_user_action
from ..metrics import record_restore, record_undo
from .cascade import cascade_restore
from .log_writer import build_log_entry, log_entry_written

logger: Final = get_logger(__name__)


class UndoOutcome(str, Enum):
    RESTORED = "RESTORED"
    # Target is no longer deleted on its own account
    STALE = "STALE"
    ALREADY_UNDONE = "ALREADY_UNDONE"
    NO_HANDLER = "NO_HANDLER"


class UndoHandler(ABC):
    """Restores the target of one kind of deletion event."""

    kind: ClassVar[EntityKind]
    model: ClassVar[type[SoftDeleteFields]]
    # Log column naming the target
    reference: ClassVar[str]
    undelete_event: LogEvent

    # Tables whose rows may have been deleted along with the target
    dependents: ClassVar[tuple[type[SoftDeleteFields], ...]] = ()

    def load_target(self, session: Session, entry: LogEntry) -> SoftDeleteFields:
        target_id = getattr(entry, self.reference)
        target = session.get(self.model, target_id) if target_id is not None else None
        if target is None:
            raise EntityNotFoundError(self.kind.value.lower(), target_id)
        return target

    def guard(self, target: SoftDeleteFields) -> bool:
        return target.is_deleted_by(DeletionMark.direct())

    def restore(self, session: Session, target: SoftDeleteFields) -> None:
        target.mark_restored()
        session.add(target)

    def cascade(self, session: Session, target: SoftDeleteFields) -> int:
        target_id = getattr(target, "id")
        restored = 0
        for model in self.dependents:
            restored += cascade_restore(session, model, self.kind, target_id)
        return restored

    @abstractmethod
    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        """References recorded on the UNDELETE entry."""


class UserUndoHandler(UndoHandler):
    kind = EntityKind.USER
    model = User
    reference = "user_id"
    undelete_event = LogEvent.UNDELETE_USER

    def restore(self, session: Session, target: SoftDeleteFields) -> None:
        assert isinstance(target, User)
        if target.anonymized:
            target.deanonymize()
        super().restore(session, target)

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, User) and target.id is not None
        return UserReference(user_id=target.id)


class CourseUndoHandler(UndoHandler):
    """Courses and intakes; the UNDELETE event follows the deletion event."""

    kind = EntityKind.COURSE
    model = Course
    reference = "course_id"
    dependents = (Unit, SessionUser, UserEvent)

    def __init__(self, undelete_event: LogEvent):
        self.undelete_event = undelete_event

    def restore(self, session: Session, target: SoftDeleteFields) -> None:
        assert isinstance(target, Course)
        if target.old_code is not None:
            if self._code_taken(session, target):
                # Keep the backup so the label still shows the old code
                logger.warning(
                    "Course code reused while deleted - restored without code",
                    course_id=target.id,
                    code=target.old_code,
                )
            else:
                target.code = target.old_code
                target.old_code = None
        super().restore(session, target)

    @staticmethod
    def _code_taken(session: Session, target: Course) -> bool:
        holder = session.exec(
            select(Course.id).where(
                col(Course.code) == target.old_code,
                col(Course.status) != EntityStatus.DELETED,
                col(Course.id) != target.id,
            )
        ).first()
        return holder is not None

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, Course) and target.id is not None
        return CourseReference(course_id=target.id)


class UnitUndoHandler(UndoHandler):
    kind = EntityKind.UNIT
    model = Unit
    reference = "unit_id"
    undelete_event = LogEvent.UNDELETE_UNIT
    dependents = (SessionUser, UserEvent)

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, Unit) and target.id is not None
        return UnitReference(unit_id=target.id, course_id=target.course_id)


class GroupUndoHandler(UndoHandler):
    kind = EntityKind.GROUP
    model = CourseGroup
    reference = "group_id"
    undelete_event = LogEvent.GROUP_USER_UNDELETE
    dependents = (UserCourseGroup,)

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, CourseGroup) and target.id is not None
        return GroupReference(group_id=target.id)


class EventUndoHandler(UndoHandler):
    kind = EntityKind.EVENT
    model = UserEvent
    reference = "user_event_id"
    undelete_event = LogEvent.EVENT_UNDELETE
    dependents = (SessionUser,)

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, UserEvent) and target.id is not None
        return EventReference(user_event_id=target.id)


class DiscussionUndoHandler(UndoHandler):
    kind = EntityKind.DISCUSSION
    model = Discussion
    reference = "discussion_id"
    undelete_event = LogEvent.DISCUSSION_UNDELETE

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, Discussion) and target.id is not None
        return DiscussionReference(discussion_id=target.id)


class NotificationUndoHandler(UndoHandler):
    kind = EntityKind.NOTIFICATION
    model = Notification
    reference = "notification_id"
    undelete_event = LogEvent.NOTIFICATION_UNDELETE

    def undelete_payload(self, target: SoftDeleteFields) -> LogPayload:
        assert isinstance(target, Notification) and target.id is not None
        return NotificationReference(notification_id=target.id)


UNDO_HANDLERS: Final[dict[LogEvent, UndoHandler]] = {
    LogEvent.USER_DELETION: UserUndoHandler(),
    LogEvent.COURSE_DELETION: CourseUndoHandler(LogEvent.UNDELETE_COURSE),
    LogEvent.INTAKE_DELETION: CourseUndoHandler(LogEvent.UNDELETE_INTAKE),
    LogEvent.GROUP_USER_DELETION: GroupUndoHandler(),
    LogEvent.EVENT_DELETION: EventUndoHandler(),
    LogEvent.DISCUSSION_DELETION: DiscussionUndoHandler(),
    LogEvent.NOTIFICATION_DELETION: NotificationUndoHandler(),
    LogEvent.UNIT_DELETION: UnitUndoHandler(),
}


def get_undo_handler(entry: LogEntry) -> UndoHandler | None:
    event = entry.known_event
    if event is None:
        return None
    return UNDO_HANDLERS.get(event)


def _finish(outcome: UndoOutcome, event_name: str) -> UndoOutcome:
    record_undo(outcome.value, event_name)
    return outcome


def _skip(session: Session, outcome: UndoOutcome, event_name: str) -> UndoOutcome:
    """End the transaction without writes, releasing the log row lock."""
    session.rollback()
    return _finish(outcome, event_name)


def undo_event(session: Session, log_id: int, actor_id: int | None) -> UndoOutcome:
    """Reverse the deletion recorded by log entry `log_id`.

    Args:
        session: Database session
        log_id: Id of the deletion log entry
        actor_id: User performing the undo, recorded on the UNDELETE entry

    Returns:
        What happened; everything but RESTORED leaves the store untouched

    Raises:
        LogNotFoundError: If no log entry has this id
        EntityNotFoundError: If the deleted record no longer exists
    """
    logger.debug("Undo requested", log_id=log_id, actor_id=actor_id)

    entry = session.exec(
        select(LogEntry).where(LogEntry.id == log_id).with_for_update()
    ).first()
    if entry is None:
        logger.warning("Undo failed - log entry not found", log_id=log_id)
        raise LogNotFoundError(f"Log {log_id} not found")

    event_name = entry.event
    handler = get_undo_handler(entry)
    if handler is None:
        logger.info(
            "Undo ignored - event is not undoable", log_id=log_id, event=event_name
        )
        return _skip(session, UndoOutcome.NO_HANDLER, event_name)

    if entry.un_delete:
        logger.info("Undo ignored - already undone", log_id=log_id, event=event_name)
        return _skip(session, UndoOutcome.ALREADY_UNDONE, event_name)

    try:
        target = handler.load_target(session, entry)
    except EntityNotFoundError:
        session.rollback()
        raise
    if not handler.guard(target):
        logger.warning(
            "Undo ignored - target is not directly deleted",
            log_id=log_id,
            event=event_name,
            target_kind=handler.kind.value,
            target_status=target.status,
        )
        return _skip(session, UndoOutcome.STALE, event_name)

    target_id = getattr(target, "id")

    try:
        handler.restore(session, target)
        dependents_restored = handler.cascade(session, target)

        undelete_entry = build_log_entry(
            handler.undelete_event,
            LogType.UNDELETE,
            actor_id,
            handler.undelete_payload(target),
        )
        session.add(undelete_entry)

        entry.un_delete = True
        session.add(entry)

        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(
            "Undo failed - transaction rolled back",
            log_id=log_id,
            event=event_name,
            error=str(e),
        )
        raise

    session.refresh(undelete_entry)
    log_entry_written(undelete_entry)

    table = str(handler.model.__tablename__)
    log_database_operation(
        operation="restore",
        table=table,
        success=True,
        entity_id=target_id,
        dependents_restored=dependents_restored,
    )
    record_restore(table, 1 + dependents_restored)
    log_user_action(
        "undo_event",
        actor_id,
        log_id=log_id,
        event=event_name,
        undelete_log_id=undelete_entry.id,
    )
    logger.info(
        "Deletion undone",
        log_id=log_id,
        event=event_name,
        dependents_restored=dependents_restored,
    )
    return _finish(UndoOutcome.RESTORED, event_name)
