from typing import Final

from sqlmodel import Session, col, select

from ..domain.entities import EntityKind, EntityStatus
from ..domain.events import LogEvent, LogType
from ..domain.payloads import GroupMembershipReference, GroupReference
from ..infrastructure.database.models import CourseGroup, User, UserCourseGroup
from ..logging_config import get_logger
from ..logging_utils import log_database_operation
from .cascade import cascade_delete
from .entity_store import delete_directly, get_active, report_deletion
from .log_writer import record_activity
from .validation import validate_entity_name_with_logging

logger: Final = get_logger(__name__)


def get_group(session: Session, group_id: int) -> CourseGroup:
    return get_active(session, CourseGroup, group_id, EntityKind.GROUP)


def _active_membership(
    session: Session, group_id: int, user_id: int
) -> UserCourseGroup | None:
    statement: Final = select(UserCourseGroup).where(
        col(UserCourseGroup.group_id) == group_id,
        col(UserCourseGroup.user_id) == user_id,
        col(UserCourseGroup.status) == EntityStatus.ACTIVE,
    )
    return session.exec(statement).first()


def create_group(
    session: Session, name: str, actor_id: int | None, course_id: int | None = None
) -> CourseGroup:
    validate_entity_name_with_logging(name, "group")

    group: Final = CourseGroup(name=name.strip(), course_id=course_id)
    session.add(group)
    session.commit()
    session.refresh(group)
    assert group.id is not None

    log_database_operation(operation="create", table="course_groups", group_id=group.id)
    record_activity(
        session,
        LogEvent.GROUP_USER_CREATION,
        LogType.CREATE,
        actor_id,
        GroupReference(group_id=group.id),
    )
    return group


def update_group(
    session: Session, group_id: int, name: str, actor_id: int | None
) -> CourseGroup:
    group: Final = get_group(session, group_id)
    validate_entity_name_with_logging(name, "group")
    group.name = name.strip()

    session.add(group)
    session.commit()
    session.refresh(group)

    log_database_operation(operation="update", table="course_groups", group_id=group_id)
    record_activity(
        session,
        LogEvent.GROUP_USER_UPDATE,
        LogType.UPDATE,
        actor_id,
        GroupReference(group_id=group_id),
    )
    return group


def delete_group(session: Session, group_id: int, actor_id: int | None) -> CourseGroup:
    """Soft delete a group together with its ACTIVE memberships."""
    group: Final = get_group(session, group_id)

    delete_directly(session, group)
    cascaded = cascade_delete(
        session,
        UserCourseGroup,
        EntityKind.GROUP,
        group_id,
        col(UserCourseGroup.group_id) == group_id,
    )
    session.commit()

    report_deletion(EntityKind.GROUP, group_id, cascaded)
    record_activity(
        session,
        LogEvent.GROUP_USER_DELETION,
        LogType.DELETE,
        actor_id,
        GroupReference(group_id=group_id),
    )
    return group


def add_user_to_group(
    session: Session, group_id: int, user_id: int, actor_id: int | None
) -> UserCourseGroup:
    """Add a member; an existing ACTIVE membership is returned unchanged."""
    get_group(session, group_id)
    get_active(session, User, user_id, EntityKind.USER)

    existing = _active_membership(session, group_id, user_id)
    if existing is not None:
        logger.debug("User already in group", group_id=group_id, user_id=user_id)
        return existing

    membership: Final = UserCourseGroup(user_id=user_id, group_id=group_id)
    session.add(membership)
    session.commit()
    session.refresh(membership)

    log_database_operation(
        operation="create",
        table="user_course_groups",
        group_id=group_id,
        user_id=user_id,
    )
    record_activity(
        session,
        LogEvent.ADD_USER_TO_GROUP,
        LogType.ADD,
        actor_id,
        GroupMembershipReference(user_id=user_id, group_id=group_id),
    )
    return membership


def remove_user_from_group(
    session: Session, group_id: int, user_id: int, actor_id: int | None
) -> bool:
    """Remove a member.

    Returns:
        True if a membership was removed, False if the user was not a member
    """
    membership = _active_membership(session, group_id, user_id)
    if membership is None:
        logger.warning(
            "Membership removal failed - not a member",
            group_id=group_id,
            user_id=user_id,
        )
        return False

    delete_directly(session, membership)
    session.commit()

    report_deletion(EntityKind.USER_GROUP, membership.id, group_id=group_id)
    record_activity(
        session,
        LogEvent.REMOVE_USER_FROM_GROUP,
        LogType.REMOVE,
        actor_id,
        GroupMembershipReference(user_id=user_id, group_id=group_id),
    )
    return True
