"""Shared validation helpers for the entity services."""

from ..domain.entities import validate_entity_name
from ..domain.exceptions import ValidationError
from ..logging_config import get_logger

logger = get_logger(__name__)


def validate_entity_name_with_logging(name: str, entity_type: str = "entity") -> None:
    """Validate entity name, logging the reason of a rejection.

    Args:
        name: The name to validate
        entity_type: Type of entity being validated (for error messages)

    Raises:
        ValidationError: If name is empty, too long, or contains problematic characters
    """
    try:
        validate_entity_name(name, entity_type)
    except ValidationError as e:
        if "empty" in str(e):
            logger.warning(
                f"{entity_type.title()} validation failed - empty name provided",
                attempted_name=repr(name),
                entity_type=entity_type,
            )
        elif "longer" in str(e):
            logger.warning(
                f"{entity_type.title()} validation failed - name too long",
                name_length=len(name),
                entity_type=entity_type,
            )
        else:
            logger.warning(
                f"{entity_type.title()} validation failed - contains problematic "
                + "character",
                attempted_name=repr(name),
                entity_type=entity_type,
            )
        raise
