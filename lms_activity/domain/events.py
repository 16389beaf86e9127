"""Activity log event catalogue."""

from enum import Enum


class LogType(str, Enum):
    """Coarse category of a logged event."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNDELETE = "UNDELETE"
    LOGIN = "LOGIN"
    REGISTER = "REGISTER"
    ADD = "ADD"
    REMOVE = "REMOVE"
    PASSED = "PASSED"
    NOTPASSED = "NOTPASSED"
    COMPLETED = "COMPLETED"
    GRADED = "GRADED"
    DOWNLOAD = "DOWNLOAD"
    RESUBMIT = "RESUBMIT"
    STARTED = "STARTED"
    ENDED = "ENDED"
    IMPORT = "IMPORT"
    EXPORT = "EXPORT"


class LogEvent(str, Enum):
    USER_LOGIN = "USER_LOGIN"
    USER_REGISTER = "USER_REGISTER"
    USER_DELETION = "USER_DELETION"
    UNDELETE_USER = "UNDELETE_USER"
    USER_UPDATE = "USER_UPDATE"

    COURSE_CREATION = "COURSE_CREATION"
    COURSE_DELETION = "COURSE_DELETION"
    UNDELETE_COURSE = "UNDELETE_COURSE"
    COURSE_UPDATE = "COURSE_UPDATE"

    INTAKE_CREATION = "INTAKE_CREATION"
    INTAKE_DELETION = "INTAKE_DELETION"
    UNDELETE_INTAKE = "UNDELETE_INTAKE"
    INTAKE_UPDATE = "INTAKE_UPDATE"

    UNIT_CREATION = "UNIT_CREATION"
    UNIT_DELETION = "UNIT_DELETION"
    UNDELETE_UNIT = "UNDELETE_UNIT"
    UNIT_UPDATE = "UNIT_UPDATE"

    GROUP_USER_CREATION = "GROUP_USER_CREATION"
    GROUP_USER_DELETION = "GROUP_USER_DELETION"
    GROUP_USER_UNDELETE = "GROUP_USER_UNDELETE"
    GROUP_USER_UPDATE = "GROUP_USER_UPDATE"
    ADD_USER_TO_GROUP = "ADD_USER_TO_GROUP"
    REMOVE_USER_FROM_GROUP = "REMOVE_USER_FROM_GROUP"

    EVENT_CREATION = "EVENT_CREATION"
    EVENT_DELETION = "EVENT_DELETION"
    EVENT_UNDELETE = "EVENT_UNDELETE"
    EVENT_UPDATE = "EVENT_UPDATE"
    ADD_USER_TO_EVENT = "ADD_USER_TO_EVENT"
    REMOVE_USER_FROM_EVENT = "REMOVE_USER_FROM_EVENT"
    STARTED_EVENT = "STARTED_EVENT"
    ENDED_EVENT = "ENDED_EVENT"

    DISCUSSION_CREATION = "DISCUSSION_CREATION"
    DISCUSSION_DELETION = "DISCUSSION_DELETION"
    DISCUSSION_UNDELETE = "DISCUSSION_UNDELETE"
    DISCUSSION_UPDATE = "DISCUSSION_UPDATE"

    ADD_USER_TO_INTAKE = "ADD_USER_TO_INTAKE"
    REMOVE_USER_FROM_INTAKE = "REMOVE_USER_FROM_INTAKE"
    USER_COMPLETED_INTAKE = "USER_COMPLETED_INTAKE"
    USER_NOT_PASS_INTAKE = "USER_NOT_PASS_INTAKE"

    USER_TEST_COMPLETED = "USER_TEST_COMPLETED"
    USER_TEST_FAILED = "USER_TEST_FAILED"
    USER_TEST_RESET = "USER_TEST_RESET"
    USER_SURVEY_COMPLETED = "USER_SURVEY_COMPLETED"
    USER_ASSIGNMENT_SUBMISSION = "USER_ASSIGNMENT_SUBMISSION"
    USER_ASSIGNMENT_GRADED = "USER_ASSIGNMENT_GRADED"
    USER_ASSIGNMENT_RESET = "USER_ASSIGNMENT_RESET"
    USER_ASSIGNMENT_RESUBMIT = "USER_ASSIGNMENT_RESUBMIT"
    USER_SCORM_COMPLETED = "USER_SCORM_COMPLETED"
    USER_SCORM_RESET = "USER_SCORM_RESET"

    NOTIFICATION_CREATION = "NOTIFICATION_CREATION"
    NOTIFICATION_DELETION = "NOTIFICATION_DELETION"
    NOTIFICATION_UNDELETE = "NOTIFICATION_UNDELETE"
    NOTIFICATION_UPDATE = "NOTIFICATION_UPDATE"

    USER_DOWNLOAD = "USER_DOWNLOAD"
    IMPORT_DATA = "IMPORT_DATA"
    EXPORT_DATA = "EXPORT_DATA"

    @classmethod
    def lookup(cls, value: str) -> "LogEvent | None":
        """Return the catalogue member for a stored value, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None
