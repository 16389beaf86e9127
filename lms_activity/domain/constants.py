"""Domain business rules and constants."""

from typing import Final

# Business Rules - Core domain constraints
MAX_NAME_LENGTH: Final = 200
MAX_CODE_LENGTH: Final = 50

# Log listing
DEFAULT_PAGE_LIMIT: Final = 20
MAX_PAGE_LIMIT: Final = 200

UNDO_ACTION: Final = "UNDO"
