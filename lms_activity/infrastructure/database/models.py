from sqlmodel import Field, SQLModel

from ...domain.constants import MAX_CODE_LENGTH, MAX_NAME_LENGTH
from ...domain.entities import DeletionMark, DeletionOrigin, EntityKind, EntityStatus


class SoftDeleteFields(SQLModel):
    """Status columns shared by every soft-deletable table.

    `status` says whether a row is live; the three deletion columns say why a
    DELETED row is deleted (on its own, or carried along by which parent).
    """

    status: EntityStatus = Field(default=EntityStatus.ACTIVE, index=True)
    deletion_origin: DeletionOrigin | None = Field(default=None)
    deleted_via_kind: EntityKind | None = Field(default=None)
    deleted_via_id: int | None = Field(default=None, index=True)

    @property
    def deletion(self) -> DeletionMark | None:
        if self.status != EntityStatus.DELETED or self.deletion_origin is None:
            return None
        return DeletionMark(
            self.deletion_origin, self.deleted_via_kind, self.deleted_via_id
        )

    def mark_deleted(self, mark: DeletionMark) -> None:
        self.status = EntityStatus.DELETED
        self.deletion_origin = mark.origin
        self.deleted_via_kind = mark.parent_kind
        self.deleted_via_id = mark.parent_id

    def mark_restored(self) -> None:
        self.status = EntityStatus.ACTIVE
        self.deletion_origin = None
        self.deleted_via_kind = None
        self.deleted_via_id = None

    def is_deleted_by(self, mark: DeletionMark) -> bool:
        return self.deletion == mark


class User(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    """A platform account. Permanent deletion anonymizes the login fields."""

    __tablename__: str = "users"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    full_name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    email: str | None = Field(default=None, index=True)
    username: str | None = Field(default=None, index=True)
    is_admin: bool = False

    # Backups kept while a permanently deleted account is anonymized
    anonymized: bool = False
    old_email: str | None = None
    old_username: str | None = None

    def anonymize(self) -> None:
        self.old_email = self.email
        self.old_username = self.username
        self.email = None
        self.username = None
        self.anonymized = True

    def deanonymize(self) -> None:
        self.email = self.old_email
        self.username = self.old_username
        self.old_email = None
        self.old_username = None
        self.anonymized = False


class Course(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    """A course, or an intake when it has a parent course."""

    __tablename__: str = "courses"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, min_length=1, max_length=MAX_NAME_LENGTH)
    code: str | None = Field(default=None, index=True, max_length=MAX_CODE_LENGTH)
    # The code is released on deletion so it can be reused; kept here for undo
    old_code: str | None = Field(default=None, max_length=MAX_CODE_LENGTH)
    parent_id: int | None = Field(default=None, foreign_key="courses.id", index=True)

    @property
    def is_intake(self) -> bool:
        return self.parent_id is not None

    @property
    def display_code(self) -> str | None:
        return self.code or self.old_code


class Unit(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    __tablename__: str = "units"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    course_id: int = Field(foreign_key="courses.id", index=True)


class CourseGroup(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    __tablename__: str = "course_groups"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    course_id: int | None = Field(default=None, foreign_key="courses.id", index=True)


class UserCourseGroup(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    """Membership of a user in a course group."""

    __tablename__: str = "user_course_groups"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    group_id: int = Field(foreign_key="course_groups.id", index=True)


class UserEvent(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    """A scheduled session (classroom, webinar) optionally tied to a unit."""

    __tablename__: str = "user_events"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    unit_id: int | None = Field(default=None, foreign_key="units.id", index=True)


class SessionUser(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    """Attendance of a user in an event."""

    __tablename__: str = "session_users"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    user_event_id: int | None = Field(
        default=None, foreign_key="user_events.id", index=True
    )
    unit_id: int | None = Field(default=None, foreign_key="units.id", index=True)


class Discussion(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    __tablename__: str = "discussions"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
    course_id: int | None = Field(default=None, foreign_key="courses.id", index=True)


class Notification(SoftDeleteFields, table=True):  # type: ignore[call-arg]
    __tablename__: str = "notifications"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)


class File(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__: str = "files"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(min_length=1, max_length=MAX_NAME_LENGTH)
