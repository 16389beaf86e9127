"""Typed entity references carried by log entries.

Each event records exactly one payload shape. Field names match the
reference columns of the log table, so a payload can be written to and read
back from a row without a translation layer.
"""

from typing import Any, Final

from pydantic import BaseModel, ConfigDict

from .events import LogEvent
from .exceptions import PayloadMismatchError


class LogPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def references(self) -> dict[str, int | None]:
        """Column values to store on the log row."""
        return self.model_dump()


class NoReferences(LogPayload):
    pass


class UserReference(LogPayload):
    user_id: int


class CourseReference(LogPayload):
    course_id: int


class UnitReference(LogPayload):
    unit_id: int
    course_id: int | None = None


class UnitActivityReference(LogPayload):
    """A learner's activity on a unit; `user_id` names the learner when the
    actor acted on someone else's work (e.g. requesting a resubmission)."""

    unit_id: int
    user_id: int | None = None


class GroupReference(LogPayload):
    group_id: int


class GroupMembershipReference(LogPayload):
    user_id: int
    group_id: int


class EventReference(LogPayload):
    user_event_id: int


class EventAttendanceReference(LogPayload):
    user_id: int
    user_event_id: int


class IntakeMembershipReference(LogPayload):
    user_id: int
    course_id: int


class DiscussionReference(LogPayload):
    discussion_id: int


class NotificationReference(LogPayload):
    notification_id: int


class FileReference(LogPayload):
    file_id: int


EVENT_PAYLOADS: Final[dict[LogEvent, type[LogPayload]]] = {
    LogEvent.USER_LOGIN: NoReferences,
    LogEvent.USER_REGISTER: UserReference,
    LogEvent.USER_DELETION: UserReference,
    LogEvent.UNDELETE_USER: UserReference,
    LogEvent.USER_UPDATE: UserReference,
    LogEvent.COURSE_CREATION: CourseReference,
    LogEvent.COURSE_DELETION: CourseReference,
    LogEvent.UNDELETE_COURSE: CourseReference,
    LogEvent.COURSE_UPDATE: CourseReference,
    LogEvent.INTAKE_CREATION: CourseReference,
    LogEvent.INTAKE_DELETION: CourseReference,
    LogEvent.UNDELETE_INTAKE: CourseReference,
    LogEvent.INTAKE_UPDATE: CourseReference,
    LogEvent.UNIT_CREATION: UnitReference,
    LogEvent.UNIT_DELETION: UnitReference,
    LogEvent.UNDELETE_UNIT: UnitReference,
    LogEvent.UNIT_UPDATE: UnitReference,
    LogEvent.GROUP_USER_CREATION: GroupReference,
    LogEvent.GROUP_USER_DELETION: GroupReference,
    LogEvent.GROUP_USER_UNDELETE: GroupReference,
    LogEvent.GROUP_USER_UPDATE: GroupReference,
    LogEvent.ADD_USER_TO_GROUP: GroupMembershipReference,
    LogEvent.REMOVE_USER_FROM_GROUP: GroupMembershipReference,
    LogEvent.EVENT_CREATION: EventReference,
    LogEvent.EVENT_DELETION: EventReference,
    LogEvent.EVENT_UNDELETE: EventReference,
    LogEvent.EVENT_UPDATE: EventReference,
    LogEvent.ADD_USER_TO_EVENT: EventAttendanceReference,
    LogEvent.REMOVE_USER_FROM_EVENT: EventAttendanceReference,
    LogEvent.STARTED_EVENT: EventReference,
    LogEvent.ENDED_EVENT: EventReference,
    LogEvent.DISCUSSION_CREATION: DiscussionReference,
    LogEvent.DISCUSSION_DELETION: DiscussionReference,
    LogEvent.DISCUSSION_UNDELETE: DiscussionReference,
    LogEvent.DISCUSSION_UPDATE: DiscussionReference,
    LogEvent.ADD_USER_TO_INTAKE: IntakeMembershipReference,
    LogEvent.REMOVE_USER_FROM_INTAKE: IntakeMembershipReference,
    LogEvent.USER_COMPLETED_INTAKE: CourseReference,
    LogEvent.USER_NOT_PASS_INTAKE: CourseReference,
    LogEvent.USER_TEST_COMPLETED: UnitActivityReference,
    LogEvent.USER_TEST_FAILED: UnitActivityReference,
    LogEvent.USER_TEST_RESET: UnitActivityReference,
    LogEvent.USER_SURVEY_COMPLETED: UnitActivityReference,
    LogEvent.USER_ASSIGNMENT_SUBMISSION: UnitActivityReference,
    LogEvent.USER_ASSIGNMENT_GRADED: UnitActivityReference,
    LogEvent.USER_ASSIGNMENT_RESET: UnitActivityReference,
    LogEvent.USER_ASSIGNMENT_RESUBMIT: UnitActivityReference,
    LogEvent.USER_SCORM_COMPLETED: UnitActivityReference,
    LogEvent.USER_SCORM_RESET: UnitActivityReference,
    LogEvent.NOTIFICATION_CREATION: NotificationReference,
    LogEvent.NOTIFICATION_DELETION: NotificationReference,
    LogEvent.NOTIFICATION_UNDELETE: NotificationReference,
    LogEvent.NOTIFICATION_UPDATE: NotificationReference,
    LogEvent.USER_DOWNLOAD: FileReference,
    LogEvent.IMPORT_DATA: NoReferences,
    LogEvent.EXPORT_DATA: NoReferences,
}


def check_payload(event: LogEvent, payload: LogPayload) -> None:
    """Raise if `payload` is not the variant `event` records."""
    expected = EVENT_PAYLOADS[event]
    if type(payload) is not expected:
        raise PayloadMismatchError(
            f"{event.value} expects {expected.__name__}, "
            f"got {type(payload).__name__}"
        )


def payload_from_row(event: LogEvent, row: Any) -> LogPayload:
    """Rebuild the typed payload of `event` from a row's reference columns."""
    payload_class = EVENT_PAYLOADS[event]
    return payload_class.model_validate(
        {name: getattr(row, name) for name in payload_class.model_fields}
    )
