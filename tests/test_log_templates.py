"""Tests for log description templates and their rendering context."""

from datetime import datetime, timedelta

import pytest

from lms_activity.application.log_templates import (
    DESCRIPTION_TEMPLATES,
    PLACEHOLDER_COLUMNS,
    UNAVAILABLE,
    DescriptionTemplate,
    RenderContext,
    ResolvedReferences,
    render_description,
    template_fits_payload,
)
from lms_activity.domain.events import LogEvent
from lms_activity.infrastructure.database.log_models import LogEntry
from lms_activity.infrastructure.database.models import (
    Course,
    CourseGroup,
    Discussion,
    File,
    Notification,
    Unit,
    User,
    UserEvent,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)
ACTOR_ID = 1
VIEWER_ID = 2


def _references() -> ResolvedReferences:
    return ResolvedReferences(
        users={
            ACTOR_ID: User(id=ACTOR_ID, full_name="Ada Admin"),
            VIEWER_ID: User(id=VIEWER_ID, full_name="Victor Viewer"),
            3: User(id=3, full_name="Lena Learner"),
        },
        courses={4: Course(id=4, name="Biology", code="BIO-1")},
        units={5: Unit(id=5, title="Cells", course_id=4)},
        groups={6: CourseGroup(id=6, name="Morning cohort")},
        events={7: UserEvent(id=7, name="Lab day")},
        discussions={8: Discussion(id=8, name="Questions")},
        notifications={9: Notification(id=9, name="Exam dates")},
        files={10: File(id=10, title="syllabus.pdf")},
    )


def _entry(event: LogEvent, actor_id: int | None = ACTOR_ID, **references):
    return LogEntry(
        id=100,
        event=event.value,
        type="DELETE",
        actor_id=actor_id,
        created_at=NOW - timedelta(hours=3),
        **references,
    )


FULL_REFERENCES = {
    "user_id": 3,
    "course_id": 4,
    "unit_id": 5,
    "group_id": 6,
    "user_event_id": 7,
    "discussion_id": 8,
    "notification_id": 9,
    "file_id": 10,
}


def test_every_event_has_a_template():
    assert set(DESCRIPTION_TEMPLATES) == set(LogEvent)


@pytest.mark.parametrize("event", list(LogEvent))
def test_templates_only_read_recorded_references(event: LogEvent):
    assert template_fits_payload(event)


@pytest.mark.parametrize("event", list(LogEvent))
def test_every_template_renders(event: LogEvent):
    context = RenderContext(
        _entry(event, **FULL_REFERENCES), VIEWER_ID, _references(), NOW
    )

    description = render_description(context)

    assert description is not None
    assert description.startswith("<strong>Ada Admin</strong> ")
    assert description.endswith(" - <span>3 hours ago</span>")
    assert UNAVAILABLE not in description
    assert "{" not in description


def test_template_placeholders():
    template = DescriptionTemplate("{sender} added the user {user} to group {group}")
    assert template.placeholders == frozenset({"sender", "user", "group"})
    assert set(PLACEHOLDER_COLUMNS) >= {"user", "group"}


def test_course_label_includes_code():
    context = RenderContext(
        _entry(LogEvent.COURSE_DELETION, course_id=4), None, _references(), NOW
    )
    assert render_description(context) == (
        "<strong>Ada Admin</strong> deleted the course "
        "<strong>Biology</strong> (BIO-1) - <span>3 hours ago</span>"
    )


def test_course_label_falls_back_to_released_code():
    references = _references()
    references.courses[4] = Course(id=4, name="Biology", code=None, old_code="BIO-1")
    context = RenderContext(
        _entry(LogEvent.COURSE_DELETION, course_id=4), None, references, NOW
    )
    assert "<strong>Biology</strong> (BIO-1)" in (render_description(context) or "")


def test_sender_is_you_for_the_viewer():
    context = RenderContext(
        _entry(LogEvent.USER_LOGIN, actor_id=VIEWER_ID), VIEWER_ID, _references(), NOW
    )
    assert render_description(context) == (
        "<strong>You</strong> signed in - <span>3 hours ago</span>"
    )


def test_sender_is_system_without_actor():
    context = RenderContext(
        _entry(LogEvent.IMPORT_DATA, actor_id=None), VIEWER_ID, _references(), NOW
    )
    assert render_description(context) == (
        "<strong>System</strong> imported data - <span>3 hours ago</span>"
    )


def test_unresolved_reference_renders_unavailable():
    context = RenderContext(
        _entry(LogEvent.USER_DELETION, user_id=404), VIEWER_ID, _references(), NOW
    )
    assert render_description(context) == (
        f"<strong>Ada Admin</strong> deleted the user {UNAVAILABLE}"
        " - <span>3 hours ago</span>"
    )


def test_names_are_escaped():
    references = _references()
    references.users[3] = User(id=3, full_name="<script>alert(1)</script>")
    context = RenderContext(
        _entry(LogEvent.USER_UPDATE, user_id=3), VIEWER_ID, references, NOW
    )
    description = render_description(context) or ""
    assert "<script>" not in description
    assert "&lt;script&gt;" in description


def test_unknown_event_renders_no_description():
    entry = LogEntry(id=101, event="LEGACY_EVENT", type="DELETE", created_at=NOW)
    context = RenderContext(entry, VIEWER_ID, _references(), NOW)
    assert render_description(context) is None
