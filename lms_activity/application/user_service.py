from typing import Final

from sqlmodel import Session

from ..domain.entities import EntityKind
from ..domain.events import LogEvent, LogType
from ..domain.exceptions import EntityNotFoundError
from ..domain.payloads import NoReferences, UserReference
from ..infrastructure.database.models import User
from ..logging_config import get_logger
from ..logging_utils import log_database_operation, log_user_action
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def get_user(session: Session, user_id: int) -> User:
    return get_active(session, User, user_id, EntityKind.USER)


def create_user(
    session: Session,
    full_name: str,
    actor_id: int | None,
    email: str | None = None,
    username: str | None = None,
    is_admin: bool = False,
) -> User:
    """Register an account. `actor_id` is None for self-registration."""
    validate_entity_name_with_logging(full_name, "user")

    user: Final = User(
        full_name=full_name.strip(),
        email=email,
        username=username,
        is_admin=is_admin,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    assert user.id is not None

    log_database_operation(operation="create", table="users", user_id=user.id)
    record_activity(
        session,
        LogEvent.USER_REGISTER,
        LogType.REGISTER,
        actor_id,
        UserReference(user_id=user.id),
    )
    return user


def update_user(
    session: Session,
    user_id: int,
    actor_id: int | None,
    full_name: str | None = None,
    email: str | None = None,
    username: str | None = None,
) -> User:
    user: Final = get_user(session, user_id)

    if full_name is not None:
        validate_entity_name_with_logging(full_name, "user")
        user.full_name = full_name.strip()
    if email is not None:
        user.email = email
    if username is not None:
        user.username = username

    session.add(user)
    session.commit()
    session.refresh(user)

    log_database_operation(operation="update", table="users", user_id=user_id)
    record_activity(
        session,
        LogEvent.USER_UPDATE,
        LogType.UPDATE,
        actor_id,
        UserReference(user_id=user_id),
    )
    return user


def delete_user(session: Session, user_id: int, actor_id: int | None) -> User:
    user: Final = get_user(session, user_id)

    delete_directly(session, user)
    session.commit()

    report_deletion(EntityKind.USER, user_id)
    record_activity(
        session,
        LogEvent.USER_DELETION,
        LogType.DELETE,
        actor_id,
        UserReference(user_id=user_id),
    )
    return user


def permanently_delete_user(
    session: Session, user_id: int, actor_id: int | None
) -> User:
    """Delete an account and free its email and username.

    Accounts already in the trash (soft deleted) can be purged too. The login
    fields move to backup columns, so an undo can still bring the account back
    as it was.

    Raises:
        EntityNotFoundError: If the user does not exist or is already anonymized
    """
    user: Final = session.get(User, user_id)
    if user is None or user.anonymized:
        logger.warning("Permanent delete failed - no such account", user_id=user_id)
        raise EntityNotFoundError(EntityKind.USER.value.lower(), user_id)

    delete_directly(session, user)
    user.anonymize()
    session.commit()

    report_deletion(EntityKind.USER, user_id, anonymized=True)
    record_activity(
        session,
        LogEvent.USER_DELETION,
        LogType.DELETE,
        actor_id,
        UserReference(user_id=user_id),
    )
    return user


def record_login(session: Session, user_id: int) -> None:
    get_user(session, user_id)
    log_user_action("login", user_id)
    record_activity(
        session, LogEvent.USER_LOGIN, LogType.LOGIN, user_id, NoReferences()
    )
