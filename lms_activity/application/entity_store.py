"""Lookup and soft-delete helpers shared by the entity services."""

from typing import Final, TypeVar

from sqlmodel import Session

from ..domain.entities import DeletionMark, DeletionOrigin, EntityKind, EntityStatus
from ..domain.exceptions import EntityNotFoundError
from ..infrastructure.database.models import SoftDeleteFields
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from ..metrics import record_soft_delete

logger: Final = get_logger(__name__)

SoftDeletableT = TypeVar("SoftDeletableT", bound=SoftDeleteFields)


def get_active(
    session: Session, model: type[SoftDeletableT], entity_id: int, kind: EntityKind
) -> SoftDeletableT:
    """Load a record that is not deleted.

    Raises:
        EntityNotFoundError: If the id does not resolve or the record is deleted
    """
    entity = session.get(model, entity_id)
    if entity is None or entity.status == EntityStatus.DELETED:
        logger.warning("Entity lookup failed", kind=kind.value, entity_id=entity_id)
        raise EntityNotFoundError(kind.value.lower(), entity_id)
    return entity


def delete_directly(session: Session, entity: SoftDeleteFields) -> None:
    """Stage a direct soft-delete of `entity`; the caller commits."""
    entity.mark_deleted(DeletionMark.direct())
    session.add(entity)


def report_deletion(
    kind: EntityKind, entity_id: int | None, cascaded: int = 0, **context
) -> None:
    """Log and count a committed deletion and its cascade."""
    log_database_operation(
        operation="soft_delete",
        table=kind.value.lower(),
        success=True,
        entity_id=entity_id,
        cascaded=cascaded,
        **context,
    )
    record_soft_delete(kind.value, DeletionOrigin.DIRECT.value)
    record_soft_delete(kind.value, DeletionOrigin.CASCADE.value, cascaded)
    logger.info(
        "Entity soft deleted",
        kind=kind.value,
        entity_id=entity_id,
        cascaded=cascaded,
    )
