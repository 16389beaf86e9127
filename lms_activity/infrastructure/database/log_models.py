"""Database model for the activity log.

Log entries are append-only: the single field allowed to change after insert
is `un_delete`, and only from False to True.
"""

from datetime import datetime
from typing import Final

from sqlalchemy import event, inspect
from sqlmodel import Field, SQLModel

from ...domain.events import LogEvent
from ...domain.exceptions import ImmutableLogError
from ...domain.payloads import LogPayload, payload_from_row
from ...utils import utcnow

# Reference columns; names match the fields of the payload models
REFERENCE_COLUMNS: Final = (
    "user_id",
    "course_id",
    "unit_id",
    "group_id",
    "user_event_id",
    "notification_id",
    "discussion_id",
    "file_id",
)

_IMMUTABLE_COLUMNS: Final = (
    "event",
    "type",
    "actor_id",
    "created_at",
    *REFERENCE_COLUMNS,
)


class LogEntry(SQLModel, table=True):  # type: ignore[call-arg]
    """One recorded domain mutation."""

    __tablename__: str = "logs"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)

    # Stored as plain strings so rows written by newer catalogues still load
    event: str = Field(index=True)
    type: str = Field(index=True)

    # Null for system-generated events
    actor_id: int | None = Field(default=None, foreign_key="users.id", index=True)

    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    course_id: int | None = Field(default=None, foreign_key="courses.id", index=True)
    unit_id: int | None = Field(default=None, foreign_key="units.id")
    group_id: int | None = Field(default=None, foreign_key="course_groups.id")
    user_event_id: int | None = Field(default=None, foreign_key="user_events.id")
    notification_id: int | None = Field(default=None, foreign_key="notifications.id")
    discussion_id: int | None = Field(default=None, foreign_key="discussions.id")
    file_id: int | None = Field(default=None, foreign_key="files.id")

    un_delete: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, index=True)

    @property
    def known_event(self) -> LogEvent | None:
        return LogEvent.lookup(self.event)

    @property
    def payload(self) -> LogPayload | None:
        """Typed references of this entry, None when the event is unknown."""
        known = self.known_event
        if known is None:
            return None
        return payload_from_row(known, self)


@event.listens_for(LogEntry, "before_update")
def _reject_log_rewrites(mapper, connection, target: LogEntry) -> None:
    state = inspect(target)
    changed = [
        name for name in _IMMUTABLE_COLUMNS if state.attrs[name].history.has_changes()
    ]
    if changed:
        raise ImmutableLogError(
            f"Log entry {target.id} is append-only; refused to change "
            + ", ".join(changed)
        )

    if state.attrs["un_delete"].history.has_changes() and not target.un_delete:
        raise ImmutableLogError(f"Log entry {target.id} was already undone")
