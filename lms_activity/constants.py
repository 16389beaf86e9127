"""Infrastructure and technical constants."""

from typing import Final

# Technical configuration constants
DEFAULT_PORT: Final = 8000
METRICS_PORT: Final = 8080
VIEWER_HEADER: Final = "X-User-Id"
