"""Soft-delete propagation from a parent record to its dependents.

Dependents taken down by a parent carry a cascade mark naming that parent,
so a later restore selects them from the store alone. Both helpers only
stage changes on the session; the caller commits and reports.
"""

from typing import Any

from sqlmodel import Session, col, select

from ..domain.entities import DeletionMark, DeletionOrigin, EntityKind, EntityStatus
from ..infrastructure.database.models import SoftDeleteFields
from ..logging_config import get_logger

logger = get_logger(__name__)


def cascaded_from_clause(
    model: type[SoftDeleteFields], parent_kind: EntityKind, parent_id: int
) -> tuple[Any, ...]:
    """WHERE terms matching rows deleted along with the given parent."""
    return (
        col(model.status) == EntityStatus.DELETED,
        col(model.deletion_origin) == DeletionOrigin.CASCADE,
        col(model.deleted_via_kind) == parent_kind,
        col(model.deleted_via_id) == parent_id,
    )


def cascade_delete(
    session: Session,
    model: type[SoftDeleteFields],
    parent_kind: EntityKind,
    parent_id: int,
    *conditions: Any,
) -> int:
    """Mark ACTIVE rows of `model` matching `conditions` as cascaded from the parent.

    Returns:
        Number of rows marked
    """
    mark = DeletionMark.cascaded_from(parent_kind, parent_id)
    rows = session.exec(
        select(model).where(col(model.status) == EntityStatus.ACTIVE, *conditions)
    ).all()

    for row in rows:
        row.mark_deleted(mark)
        session.add(row)

    logger.debug(
        "Cascade delete staged",
        model=model.__name__,
        parent_kind=parent_kind.value,
        parent_id=parent_id,
        count=len(rows),
    )
    return len(rows)


def cascade_restore(
    session: Session,
    model: type[SoftDeleteFields],
    parent_kind: EntityKind,
    parent_id: int,
) -> int:
    """Reactivate rows of `model` that were deleted along with the parent.

    Rows deleted on their own, or by another parent, are left alone.

    Returns:
        Number of rows restored
    """
    rows = session.exec(
        select(model).where(*cascaded_from_clause(model, parent_kind, parent_id))
    ).all()

    for row in rows:
        row.mark_restored()
        session.add(row)

    logger.debug(
        "Cascade restore staged",
        model=model.__name__,
        parent_kind=parent_kind.value,
        parent_id=parent_id,
        count=len(rows),
    )
    return len(rows)
