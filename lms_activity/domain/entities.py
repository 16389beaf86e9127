"""Pure domain types without infrastructure dependencies."""

from dataclasses import dataclass
from enum import Enum

from .constants import MAX_NAME_LENGTH
from .exceptions import ValidationError


def validate_entity_name(name: str, entity_type: str = "entity") -> None:
    """Validate entity name according to domain business rules.

    Pure domain validation without logging or external dependencies.

    Args:
        name: The name to validate
        entity_type: Type of entity being validated (for error messages)

    Raises:
        ValidationError: If name is empty, too long, or contains problematic characters
    """
    if not name or not name.strip():
        raise ValidationError(f"{entity_type.title()} name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"{entity_type.title()} name cannot be longer than {MAX_NAME_LENGTH} "
            + "characters"
        )

    for char in name:
        if (ord(char) < 32 and char not in [" "]) or ord(char) == 127:
            raise ValidationError(
                f"{entity_type.title()} name cannot contain newlines, tabs, "
                + "or other control characters"
            )


class EntityStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DELETED = "DELETED"
    DRAFT = "DRAFT"


class EntityKind(str, Enum):
    USER = "USER"
    COURSE = "COURSE"
    UNIT = "UNIT"
    GROUP = "GROUP"
    USER_GROUP = "USER_GROUP"
    EVENT = "EVENT"
    SESSION_USER = "SESSION_USER"
    DISCUSSION = "DISCUSSION"
    NOTIFICATION = "NOTIFICATION"
    FILE = "FILE"


class DeletionOrigin(str, Enum):
    """Whether a record was deleted on its own or along with a parent."""

    DIRECT = "DIRECT"
    CASCADE = "CASCADE"


@dataclass(frozen=True)
class DeletionMark:
    """Why a record is in the DELETED status.

    A direct mark has no parent. A cascade mark names the parent whose
    deletion carried this record along, so restoring that parent can find
    exactly the records it took down and nothing else.
    """

    origin: DeletionOrigin
    parent_kind: EntityKind | None = None
    parent_id: int | None = None

    def __post_init__(self):
        if self.origin == DeletionOrigin.CASCADE and (
            self.parent_kind is None or self.parent_id is None
        ):
            raise ValidationError("Cascade deletion requires a parent reference")
        if self.origin == DeletionOrigin.DIRECT and (
            self.parent_kind is not None or self.parent_id is not None
        ):
            raise ValidationError("Direct deletion cannot name a parent")

    @classmethod
    def direct(cls) -> "DeletionMark":
        return cls(DeletionOrigin.DIRECT)

    @classmethod
    def cascaded_from(cls, kind: EntityKind, parent_id: int) -> "DeletionMark":
        return cls(DeletionOrigin.CASCADE, kind, parent_id)

    @property
    def is_cascade(self) -> bool:
        return self.origin == DeletionOrigin.CASCADE
