"""Appending entries to the activity log."""

from typing import Final

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..domain.events import LogEvent, LogType
from ..domain.payloads import LogPayload, check_payload
from ..infrastructure.database.log_models import LogEntry
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from ..metrics import record_log_written

logger: Final = get_logger(__name__)


def build_log_entry(
    event: LogEvent,
    log_type: LogType,
    actor_id: int | None,
    payload: LogPayload,
) -> LogEntry:
    """Validate the payload variant and build an unsaved log row."""
    check_payload(event, payload)
    return LogEntry(
        event=event.value,
        type=log_type.value,
        actor_id=actor_id,
        **payload.references(),
    )


def log_entry_written(entry: LogEntry) -> None:
    """Report a committed log row to the logs and metrics."""
    log_database_operation(
        operation="create",
        table="logs",
        success=True,
        log_id=entry.id,
        event=entry.event,
    )
    record_log_written(entry.event, entry.type)
    logger.info(
        "Activity logged",
        log_id=entry.id,
        event=entry.event,
        type=entry.type,
        actor_id=entry.actor_id,
    )


def create_log(
    session: Session,
    event: LogEvent,
    log_type: LogType,
    actor_id: int | None,
    payload: LogPayload,
) -> LogEntry:
    """Append one entry and commit it.

    Args:
        session: Database session
        event: What happened
        log_type: Coarse category of the event
        actor_id: Acting user, None for system events
        payload: Entity references; must be the variant `event` records

    Returns:
        The stored entry

    Raises:
        PayloadMismatchError: If the payload variant does not fit the event
        SQLAlchemyError: If the store rejects the write
    """
    entry: Final = build_log_entry(event, log_type, actor_id, payload)

    session.add(entry)
    session.commit()
    session.refresh(entry)

    log_entry_written(entry)
    return entry


def record_activity(
    session: Session,
    event: LogEvent,
    log_type: LogType,
    actor_id: int | None,
    payload: LogPayload,
) -> LogEntry | None:
    """Log an entity mutation that has already been committed.

    A failing log write must not undo the mutation it describes, so store
    errors are logged and swallowed here; the caller gets None.
    """
    try:
        return create_log(session, event, log_type, actor_id, payload)
    except SQLAlchemyError as e:
        session.rollback()
        log_database_operation(
            operation="create",
            table="logs",
            success=False,
            event=event.value,
            error=str(e),
        )
        logger.error(
            "Failed to record activity",
            event=event.value,
            actor_id=actor_id,
            error=str(e),
        )
        return None
