"""Human-readable descriptions of log entries.

Every catalogued event has one `DescriptionTemplate`. A template pattern uses
`{sender}` and `{time}` plus the reference placeholders of its event's payload
(`{user}`, `{course}`, `{unit}`, ...), which are filled from the entities the
reader resolved for the page.
"""

import html
from dataclasses import dataclass, field
from datetime import datetime
from string import Formatter
from typing import Final

from ..domain.events import LogEvent
from ..domain.payloads import EVENT_PAYLOADS
from ..infrastructure.database.log_models import LogEntry
from ..infrastructure.database.models import (
    Course,
    CourseGroup,
    Discussion,
    File,
    Notification,
    Unit,
    User,
    UserEvent,
)
from ..logging_config import get_logger
from ..metrics import record_missing_template
from ..utils import time_ago

logger: Final = get_logger(__name__)

# Placeholder name -> log column it reads
PLACEHOLDER_COLUMNS: Final[dict[str, str]] = {
    "user": "user_id",
    "course": "course_id",
    "unit": "unit_id",
    "group": "group_id",
    "event": "user_event_id",
    "discussion": "discussion_id",
    "notification": "notification_id",
    "file": "file_id",
}

UNAVAILABLE: Final = "<strong>(unavailable)</strong>"


def _strong(text: str | None) -> str:
    return f"<strong>{html.escape(text or '')}</strong>"


@dataclass
class ResolvedReferences:
    """Entities referenced by a page of log entries, keyed by id."""

    users: dict[int, User] = field(default_factory=dict)
    courses: dict[int, Course] = field(default_factory=dict)
    units: dict[int, Unit] = field(default_factory=dict)
    groups: dict[int, CourseGroup] = field(default_factory=dict)
    events: dict[int, UserEvent] = field(default_factory=dict)
    discussions: dict[int, Discussion] = field(default_factory=dict)
    notifications: dict[int, Notification] = field(default_factory=dict)
    files: dict[int, File] = field(default_factory=dict)


@dataclass
class RenderContext:
    entry: LogEntry
    viewer_id: int | None
    references: ResolvedReferences
    now: datetime

    def sender(self) -> str:
        actor_id = self.entry.actor_id
        if actor_id is None:
            return "<strong>System</strong>"
        if actor_id == self.viewer_id:
            return "<strong>You</strong>"
        actor = self.references.users.get(actor_id)
        if actor is None:
            return UNAVAILABLE
        return _strong(actor.full_name)

    def time(self) -> str:
        return f"<span>{time_ago(self.entry.created_at, self.now)}</span>"

    def label(self, placeholder: str) -> str:
        """Display fields of the entity behind one reference placeholder."""
        entity_id = getattr(self.entry, PLACEHOLDER_COLUMNS[placeholder])
        if entity_id is None:
            return UNAVAILABLE

        refs = self.references
        match placeholder:
            case "user":
                user = refs.users.get(entity_id)
                return _strong(user.full_name) if user else UNAVAILABLE
            case "course":
                course = refs.courses.get(entity_id)
                if course is None:
                    return UNAVAILABLE
                code = course.display_code
                suffix = f" ({html.escape(code)})" if code else ""
                return _strong(course.name) + suffix
            case "unit":
                unit = refs.units.get(entity_id)
                return _strong(unit.title) if unit else UNAVAILABLE
            case "group":
                group = refs.groups.get(entity_id)
                return _strong(group.name) if group else UNAVAILABLE
            case "event":
                user_event = refs.events.get(entity_id)
                return _strong(user_event.name) if user_event else UNAVAILABLE
            case "discussion":
                discussion = refs.discussions.get(entity_id)
                return _strong(discussion.name) if discussion else UNAVAILABLE
            case "notification":
                notification = refs.notifications.get(entity_id)
                return _strong(notification.name) if notification else UNAVAILABLE
            case "file":
                file = refs.files.get(entity_id)
                return _strong(file.title) if file else UNAVAILABLE
        raise KeyError(placeholder)


class DescriptionTemplate:
    def __init__(self, pattern: str):
        self.pattern = pattern
        self.placeholders: frozenset[str] = frozenset(
            name for _, name, _, _ in Formatter().parse(pattern) if name
        )

    def render(self, context: RenderContext) -> str:
        values: dict[str, str] = {}
        for name in self.placeholders:
            if name == "sender":
                values[name] = context.sender()
            elif name == "time":
                values[name] = context.time()
            else:
                values[name] = context.label(name)
        return self.pattern.format(**values)

    def __repr__(self) -> str:
        return f"DescriptionTemplate({self.pattern!r})"


def _t(pattern: str) -> DescriptionTemplate:
    return DescriptionTemplate(pattern + " - {time}")


DESCRIPTION_TEMPLATES: Final[dict[LogEvent, DescriptionTemplate]] = {
    LogEvent.USER_LOGIN: _t("{sender} signed in"),
    LogEvent.USER_REGISTER: _t("{sender} created the user {user}"),
    LogEvent.USER_DELETION: _t("{sender} deleted the user {user}"),
    LogEvent.UNDELETE_USER: _t("{sender} undeleted the user {user}"),
    LogEvent.USER_UPDATE: _t("{sender} updated the user profile {user}"),
    LogEvent.COURSE_CREATION: _t("{sender} created the course {course}"),
    LogEvent.COURSE_DELETION: _t("{sender} deleted the course {course}"),
    LogEvent.UNDELETE_COURSE: _t("{sender} undeleted the course {course}"),
    LogEvent.COURSE_UPDATE: _t("{sender} updated the course {course}"),
    LogEvent.INTAKE_CREATION: _t("{sender} created the intake {course}"),
    LogEvent.INTAKE_DELETION: _t("{sender} deleted the intake {course}"),
    LogEvent.UNDELETE_INTAKE: _t("{sender} undeleted the intake {course}"),
    LogEvent.INTAKE_UPDATE: _t("{sender} updated the intake {course}"),
    LogEvent.UNIT_CREATION: _t(
        "{sender} created the unit {unit} of the course {course}"
    ),
    LogEvent.UNIT_DELETION: _t(
        "{sender} deleted the unit {unit} of the course {course}"
    ),
    LogEvent.UNDELETE_UNIT: _t(
        "{sender} undeleted the unit {unit} of the course {course}"
    ),
    LogEvent.UNIT_UPDATE: _t("{sender} updated the unit {unit} of the course {course}"),
    LogEvent.GROUP_USER_CREATION: _t("{sender} created the user group {group}"),
    LogEvent.GROUP_USER_DELETION: _t("{sender} deleted the user group {group}"),
    LogEvent.GROUP_USER_UNDELETE: _t("{sender} undeleted the user group {group}"),
    LogEvent.GROUP_USER_UPDATE: _t("{sender} updated the user group {group}"),
    LogEvent.ADD_USER_TO_GROUP: _t("{sender} added the user {user} to group {group}"),
    LogEvent.REMOVE_USER_FROM_GROUP: _t(
        "{sender} removed the user {user} from group {group}"
    ),
    LogEvent.EVENT_CREATION: _t("{sender} created the event {event}"),
    LogEvent.EVENT_DELETION: _t("{sender} deleted the event {event}"),
    LogEvent.EVENT_UNDELETE: _t("{sender} undeleted the event {event}"),
    LogEvent.EVENT_UPDATE: _t("{sender} updated the event {event}"),
    LogEvent.ADD_USER_TO_EVENT: _t("{sender} added the user {user} to event {event}"),
    LogEvent.REMOVE_USER_FROM_EVENT: _t(
        "{sender} removed the user {user} from event {event}"
    ),
    LogEvent.STARTED_EVENT: _t("{sender} started the event {event}"),
    LogEvent.ENDED_EVENT: _t("{sender} ended the event {event}"),
    LogEvent.DISCUSSION_CREATION: _t("{sender} created the discussion {discussion}"),
    LogEvent.DISCUSSION_DELETION: _t("{sender} deleted the discussion {discussion}"),
    LogEvent.DISCUSSION_UNDELETE: _t("{sender} undeleted the discussion {discussion}"),
    LogEvent.DISCUSSION_UPDATE: _t("{sender} updated the discussion {discussion}"),
    LogEvent.ADD_USER_TO_INTAKE: _t(
        "{sender} added the user {user} to intake {course}"
    ),
    LogEvent.REMOVE_USER_FROM_INTAKE: _t(
        "{sender} removed the user {user} from intake {course}"
    ),
    LogEvent.USER_COMPLETED_INTAKE: _t("{sender} completed the intake {course}"),
    LogEvent.USER_NOT_PASS_INTAKE: _t("{sender} did not pass the intake {course}"),
    LogEvent.USER_TEST_COMPLETED: _t("{sender} completed the test {unit}"),
    LogEvent.USER_TEST_FAILED: _t("{sender} failed the test {unit}"),
    LogEvent.USER_TEST_RESET: _t("{sender} reset the test {unit}"),
    LogEvent.USER_SURVEY_COMPLETED: _t("{sender} completed the survey {unit}"),
    LogEvent.USER_ASSIGNMENT_SUBMISSION: _t("{sender} submitted the assignment {unit}"),
    LogEvent.USER_ASSIGNMENT_GRADED: _t("{sender} graded the assignment {unit}"),
    LogEvent.USER_ASSIGNMENT_RESET: _t("{sender} reset the assignment {unit}"),
    LogEvent.USER_ASSIGNMENT_RESUBMIT: _t(
        "{sender} requested a resubmission of the assignment {unit} for the user {user}"
    ),
    LogEvent.USER_SCORM_COMPLETED: _t("{sender} completed the scorm {unit}"),
    LogEvent.USER_SCORM_RESET: _t("{sender} reset the scorm {unit}"),
    LogEvent.NOTIFICATION_CREATION: _t(
        "{sender} created the notification {notification}"
    ),
    LogEvent.NOTIFICATION_DELETION: _t(
        "{sender} deleted the notification {notification}"
    ),
    LogEvent.NOTIFICATION_UNDELETE: _t(
        "{sender} undeleted the notification {notification}"
    ),
    LogEvent.NOTIFICATION_UPDATE: _t(
        "{sender} updated the notification {notification}"
    ),
    LogEvent.USER_DOWNLOAD: _t("{sender} downloaded the file {file}"),
    LogEvent.IMPORT_DATA: _t("{sender} imported data"),
    LogEvent.EXPORT_DATA: _t("{sender} exported data"),
}


def template_fits_payload(event: LogEvent) -> bool:
    """Whether the template only reads references its event records."""
    fields = EVENT_PAYLOADS[event].model_fields
    return all(
        PLACEHOLDER_COLUMNS[name] in fields
        for name in DESCRIPTION_TEMPLATES[event].placeholders
        if name in PLACEHOLDER_COLUMNS
    )


def render_description(context: RenderContext) -> str | None:
    """Render the entry's description, or None when its event has no template."""
    event = context.entry.known_event
    template = DESCRIPTION_TEMPLATES.get(event) if event is not None else None

    if template is None:
        logger.warning(
            "No description template for log event",
            log_id=context.entry.id,
            event=context.entry.event,
        )
        record_missing_template(context.entry.event)
        return None

    return template.render(context)
