"""Listing, rendering and purging the activity log."""

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Final, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Session, SQLModel, col, func, select

from ..config import settings
from ..domain.constants import UNDO_ACTION
from ..domain.events import LogEvent, LogType
from ..infrastructure.database.log_models import LogEntry
from ..infrastructure.database.models import (
    Course,
    CourseGroup,
    Discussion,
    File,
    Notification,
    Unit,
    User,
    UserEvent,
)
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from ..utils import utcnow
from .log_templates import RenderContext, ResolvedReferences, render_description
from .undo_service import get_undo_handler

logger: Final = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LogOrder(str, Enum):
    DESC = "desc"
    ASC = "asc"


class LogQuery(CamelModel):
    """Filters and paging of a log listing. All filters combine with AND."""

    page: int = 1
    row_per_page: int | None = None
    event: str | None = None
    type: str | None = None
    # Actor
    user: int | None = None
    course: int | None = None
    # Intakes are courses; takes precedence over `course`
    intake: int | None = None
    group: int | None = None
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None
    order: LogOrder = LogOrder.DESC

    @field_validator("from_", "to")
    @classmethod
    def _as_naive_utc(cls, value: datetime | None) -> datetime | None:
        # Stored timestamps are naive UTC
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value

    @property
    def effective_page(self) -> int:
        return max(self.page, 1)

    @property
    def effective_limit(self) -> int:
        if self.row_per_page is None:
            return settings.default_page_limit
        if self.row_per_page < 1 or self.row_per_page > settings.max_page_limit:
            return settings.max_page_limit
        return self.row_per_page


class RenderedLogEntry(CamelModel):
    id: int
    event: str
    type: str
    un_delete: bool
    description: str | None
    action: list[str] = Field(default_factory=list)
    created_at: datetime


class LogPage(CamelModel):
    data: list[RenderedLogEntry]
    current_page: int
    total_page: int
    total_items: int


def _filter_conditions(query: LogQuery) -> list[Any]:
    conditions: list[Any] = []
    if query.event:
        conditions.append(col(LogEntry.event) == query.event)
    if query.type:
        conditions.append(col(LogEntry.type) == query.type)
    if query.user is not None:
        conditions.append(col(LogEntry.actor_id) == query.user)

    course_id = query.intake if query.intake is not None else query.course
    if course_id is not None:
        conditions.append(col(LogEntry.course_id) == course_id)
    if query.group is not None:
        conditions.append(col(LogEntry.group_id) == query.group)

    if query.from_ is not None:
        conditions.append(col(LogEntry.created_at) >= query.from_)
    if query.to is not None:
        conditions.append(col(LogEntry.created_at) <= query.to)
    return conditions


def _ids(values: Iterable[int | None]) -> set[int]:
    return {value for value in values if value is not None}


def _load_by_id(
    session: Session, model: type[ModelT], ids: set[int]
) -> dict[int, ModelT]:
    if not ids:
        return {}
    id_column = col(model.id)  # type: ignore[attr-defined]
    rows = session.exec(select(model).where(id_column.in_(ids))).all()
    return {row.id: row for row in rows}  # type: ignore[attr-defined]


def resolve_references(
    session: Session, entries: Sequence[LogEntry]
) -> ResolvedReferences:
    """Load every entity a page of entries refers to, one query per table.

    Deleted records are included; a deletion entry still names what it deleted.
    """
    user_ids = _ids(e.user_id for e in entries) | _ids(e.actor_id for e in entries)
    return ResolvedReferences(
        users=_load_by_id(session, User, user_ids),
        courses=_load_by_id(session, Course, _ids(e.course_id for e in entries)),
        units=_load_by_id(session, Unit, _ids(e.unit_id for e in entries)),
        groups=_load_by_id(session, CourseGroup, _ids(e.group_id for e in entries)),
        events=_load_by_id(session, UserEvent, _ids(e.user_event_id for e in entries)),
        discussions=_load_by_id(
            session, Discussion, _ids(e.discussion_id for e in entries)
        ),
        notifications=_load_by_id(
            session, Notification, _ids(e.notification_id for e in entries)
        ),
        files=_load_by_id(session, File, _ids(e.file_id for e in entries)),
    )


def available_actions(entry: LogEntry) -> list[str]:
    """UNDO is offered on deletions that have a handler and were not undone.

    Whether the target is still deleted is checked when the undo runs.
    """
    if entry.type != LogType.DELETE.value or entry.un_delete:
        return []
    if get_undo_handler(entry) is None:
        return []
    return [UNDO_ACTION]


def render_entry(context: RenderContext) -> RenderedLogEntry:
    entry = context.entry
    assert entry.id is not None
    return RenderedLogEntry(
        id=entry.id,
        event=entry.event,
        type=entry.type,
        un_delete=entry.un_delete,
        description=render_description(context),
        action=available_actions(entry),
        created_at=entry.created_at,
    )


def get_logs(
    session: Session,
    query: LogQuery,
    viewer_id: int | None,
    now: datetime | None = None,
) -> LogPage:
    """One page of log entries, newest first unless ascending order is asked for.

    Args:
        session: Database session
        query: Filters and paging
        viewer_id: User reading the log; their own entries render as "You"
        now: Reference time of the relative timestamps

    Returns:
        The rendered page with paging totals
    """
    page = query.effective_page
    limit = query.effective_limit
    conditions = _filter_conditions(query)

    total_items = session.exec(
        select(func.count()).select_from(LogEntry).where(*conditions)
    ).one()

    id_column = col(LogEntry.id)
    order_by = id_column.asc() if query.order == LogOrder.ASC else id_column.desc()
    entries = session.exec(
        select(LogEntry)
        .where(*conditions)
        .order_by(order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    references = resolve_references(session, entries)
    reference_time = now or utcnow()
    data = [
        render_entry(RenderContext(entry, viewer_id, references, reference_time))
        for entry in entries
    ]

    logger.debug(
        "Logs listed",
        page=page,
        limit=limit,
        total_items=total_items,
        returned=len(data),
    )
    return LogPage(
        data=data,
        current_page=page,
        total_page=math.ceil(total_items / limit),
        total_items=total_items,
    )


def list_events() -> list[str]:
    return [event.value for event in LogEvent]


def list_types() -> list[str]:
    return [log_type.value for log_type in LogType]


def clean_logs(session: Session) -> int:
    """Delete every log entry.

    Returns:
        Number of entries removed
    """
    entries = session.exec(select(LogEntry)).all()
    for entry in entries:
        session.delete(entry)
    session.commit()

    log_database_operation(operation="purge", table="logs", count=len(entries))
    logger.info("Activity log cleaned", deleted_count=len(entries))
    return len(entries)
