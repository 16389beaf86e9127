"""Utilities for handling FastAPI requests."""

from fastapi import Depends, Header
from sqlmodel import Session

from ..constants import VIEWER_HEADER
from ..domain.entities import EntityStatus
from ..domain.exceptions import AuthenticationError, PermissionDeniedError
from ..infrastructure.database.database import get_session
from ..infrastructure.database.models import User
from ..logging_config import get_logger

logger = get_logger(__name__)


def get_viewer(
    session: Session = Depends(get_session),
    viewer_id: str | None = Header(default=None, alias=VIEWER_HEADER),
) -> User:
    """Resolve the calling user from the viewer header.

    Raises:
        AuthenticationError: If the header is missing, malformed or unknown
    """
    if viewer_id is None or not viewer_id.strip().isdigit():
        raise AuthenticationError(f"Missing or invalid {VIEWER_HEADER} header")

    user = session.get(User, int(viewer_id))
    if user is None or user.status == EntityStatus.DELETED:
        logger.warning("Unknown viewer", viewer_id=viewer_id)
        raise AuthenticationError(f"Unknown user {viewer_id}")
    return user


def get_admin_viewer(viewer: User = Depends(get_viewer)) -> User:
    """Only administrators may read or change the activity log."""
    if not viewer.is_admin:
        logger.warning("Non-admin access to activity log", viewer_id=viewer.id)
        raise PermissionDeniedError("Administrator access required")
    return viewer
