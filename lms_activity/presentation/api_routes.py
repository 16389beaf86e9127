from datetime import datetime
from typing import Final

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..application.log_reader import (
    CamelModel,
    LogOrder,
    LogPage,
    LogQuery,
    clean_logs,
    get_logs,
    list_events,
    list_types,
)
from ..application.undo_service import UndoOutcome, undo_event
from ..infrastructure.database.database import get_session
from ..infrastructure.database.models import User
from ..logging_utils import log_user_action
from .request_utils import get_admin_viewer

api_router: Final = APIRouter(
    prefix="/api/v1/logs",
    tags=["logs"],
    responses={
        400: {"description": "Bad Request - Invalid query parameters"},
        401: {"description": "Unauthorized - Missing or unknown viewer"},
        403: {"description": "Forbidden - Administrator access required"},
        404: {"description": "Not Found - Log entry or entity does not exist"},
    },
)


class UndoResponse(BaseModel):
    success: bool = Field(description="Whether the request was processed")
    outcome: UndoOutcome = Field(description="What the undo did")


class CleanLogsResponse(CamelModel):
    success: bool
    deleted_count: int = Field(description="Number of removed log entries")


@api_router.get(
    "",
    response_model=LogPage,
    summary="List activity log entries",
    description="Filtered, paginated log with a rendered description per entry. "
    + "Deletions that can still be reverted carry `action: ['UNDO']`.",
)
async def api_get_logs(
    *,
    session: Session = Depends(get_session),
    viewer: User = Depends(get_admin_viewer),
    page: int = Query(1, description="Page number, values below 1 read as 1"),
    row_per_page: int | None = Query(
        None, alias="rowPerPage", description="Page size, 20 by default, max 200"
    ),
    event: str | None = Query(None, description="Exact event name"),
    type: str | None = Query(None, description="Exact event type"),
    user: int | None = Query(None, description="Id of the acting user"),
    course: int | None = Query(None, description="Id of the referenced course"),
    intake: int | None = Query(None, description="Id of the referenced intake"),
    group: int | None = Query(None, description="Id of the referenced group"),
    from_: datetime | None = Query(
        None, alias="from", description="Created at or after"
    ),
    to: datetime | None = Query(None, description="Created at or before"),
    order: LogOrder = Query(LogOrder.DESC, description="Sort by id"),
) -> LogPage:
    query = LogQuery(
        page=page,
        row_per_page=row_per_page,
        event=event,
        type=type,
        user=user,
        course=course,
        intake=intake,
        group=group,
        from_=from_,
        to=to,
        order=order,
    )
    return get_logs(session, query, viewer.id)


@api_router.get("/events", response_model=list[str], summary="List event names")
async def api_list_events(viewer: User = Depends(get_admin_viewer)) -> list[str]:
    return list_events()


@api_router.get("/types", response_model=list[str], summary="List event types")
async def api_list_types(viewer: User = Depends(get_admin_viewer)) -> list[str]:
    return list_types()


@api_router.post(
    "/{log_id}/undo",
    response_model=UndoResponse,
    summary="Undo a logged deletion",
    description="Restores the deleted entity and everything deleted along with "
    + "it. Entries that are not undoable, already undone or whose target was "
    + "changed since report a non-RESTORED outcome and change nothing.",
)
async def api_undo_event(
    *,
    session: Session = Depends(get_session),
    viewer: User = Depends(get_admin_viewer),
    log_id: int = Path(..., description="Id of the deletion log entry"),
) -> UndoResponse:
    outcome = undo_event(session, log_id, viewer.id)
    return UndoResponse(success=True, outcome=outcome)


@api_router.delete("", response_model=CleanLogsResponse, summary="Purge the log")
async def api_clean_logs(
    *,
    session: Session = Depends(get_session),
    viewer: User = Depends(get_admin_viewer),
) -> CleanLogsResponse:
    deleted_count = clean_logs(session)
    log_user_action("clean_logs", viewer.id, deleted_count=deleted_count)
    return CleanLogsResponse(success=True, deleted_count=deleted_count)
