"""Pytest fixtures for registrar tests.

Each test gets a fresh in-memory SQLite database built from the table
metadata, and a session with ``autobegin=False`` like the ones the container
hands out, so code under test opens its own transactions with
``session.begin()``.

Usage:
    def test_close(service: GradingService, classroom: Classroom):
        record = service.close(classroom.cohort.cohort_id, ...)
"""

from __future__ import annotations

import dataclasses
import datetime
import typing as t

import pytest
import sqlalchemy
import sqlalchemy.event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import registrar.lib.json as json
from registrar.core.config import GradingSettings
from registrar.core.provider import TimestampProvider
from registrar.grading import GradingService
from registrar.model import Activity, ActivityKind, Cohort, Course, CourseID, Submission, SubmissionStatus, User, \
    UserID, UserRole
from registrar.storage import activity as activity_storage
from registrar.storage import cohort as cohort_storage
from registrar.storage import submission as submission_storage
from registrar.storage import user as user_storage
from registrar.storage.table import metadata

NOW = datetime.datetime(2026, 3, 2, 15, 30, tzinfo=datetime.UTC)


def enable_foreign_keys(dbapi_conn: t.Any, _: t.Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine() -> t.Generator[sqlalchemy.Engine]:
    engine = sqlalchemy.create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        json_serializer=json.dumps,
        json_deserializer=json.loads,
    )
    sqlalchemy.event.listen(engine, "connect", enable_foreign_keys)
    metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def db_session(engine: sqlalchemy.Engine) -> t.Generator[Session]:
    """A session that, like production sessions, only talks to the store inside ``session.begin()``."""
    session = Session(engine, autobegin=False, expire_on_commit=False, autoflush=False)

    yield session

    session.close()


@pytest.fixture
def utcnow() -> TimestampProvider:
    return lambda: NOW


@pytest.fixture
def grading_settings() -> GradingSettings:
    return GradingSettings()


@pytest.fixture
def service(db_session: Session, utcnow: TimestampProvider, grading_settings: GradingSettings) -> GradingService:
    return GradingService(session=db_session, utcnow=utcnow, settings=grading_settings)


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users.

    Usage:
        def test_something(user_factory):
            teacher = user_factory(name="Ada", role=UserRole.Teacher)
    """
    counter = iter(range(1_000_000))

    def create_user(
        name: str = "Test User",
        email: str | None = None,
        role: UserRole = UserRole.Student,
    ) -> User:
        if email is None:
            email = f"user{next(counter)}@example.com"
        with db_session.begin():
            return user_storage.create(email=email, name=name, role=role, session=db_session)

    return create_user


@pytest.fixture
def course_factory(db_session: Session) -> t.Callable[..., Course]:
    def create_course(title: str = "Algebra I") -> Course:
        with db_session.begin():
            return activity_storage.create_course(title=title, session=db_session)

    return create_course


@pytest.fixture
def activity_factory(db_session: Session) -> t.Callable[..., Activity]:
    def create_activity(
        course_id: CourseID,
        kind: ActivityKind = ActivityKind.Quiz,
        title: str | None = None,
        lesson_position: int = 0,
        position: int = 0,
    ) -> Activity:
        with db_session.begin():
            return activity_storage.create(
                course_id=course_id,
                kind=kind,
                title=title or f"{kind.value} {lesson_position}.{position}",
                lesson_position=lesson_position,
                position=position,
                session=db_session,
            )

    return create_activity


@pytest.fixture
def cohort_factory(db_session: Session) -> t.Callable[..., Cohort]:
    """Factory fixture for creating a cohort with its courses, mentors and roster."""

    def create_cohort(
        teacher: User,
        courses: t.Sequence[Course] = (),
        students: t.Sequence[User] = (),
        mentors: t.Sequence[User] = (),
        name: str = "Spring Cohort",
    ) -> Cohort:
        with db_session.begin():
            cohort = cohort_storage.create(
                name=name,
                teacher_id=teacher.user_id,
                course_ids=[c.course_id for c in courses],
                session=db_session,
            )
            return cohort_storage.update(
                cohort.cohort_id,
                add_students=[s.user_id for s in students],
                add_mentors=[m.user_id for m in mentors],
                session=db_session,
            )

    return create_cohort


@pytest.fixture
def submission_factory(db_session: Session) -> t.Callable[..., Submission]:
    def create_submission(
        cohort: Cohort,
        student: User,
        activity: Activity,
        grade: float | None = None,
        status: SubmissionStatus | None = None,
        submitted_at: datetime.datetime | None = None,
    ) -> Submission:
        if status is None:
            status = SubmissionStatus.Graded if grade is not None else SubmissionStatus.Pending
        with db_session.begin():
            return submission_storage.create(
                {
                    "cohort_id": cohort.cohort_id,
                    "student_id": student.user_id,
                    "course_id": activity.course_id,
                    "activity_id": activity.activity_id,
                    "status": status,
                    "grade": grade,
                    "submitted_at": submitted_at,
                    "graded_at": submitted_at if grade is not None else None,
                },
                session=db_session,
            )

    return create_submission


@dataclasses.dataclass
class Classroom:
    teacher: User
    admin: User
    mentor: User
    outsider: User
    course: Course
    other_course: Course
    activities: list[Activity]
    students: list[User]
    cohort: Cohort

    @property
    def student_ids(self) -> list[UserID]:
        return [s.user_id for s in self.students]


@pytest.fixture
def classroom(
    user_factory: t.Callable[..., User],
    course_factory: t.Callable[..., Course],
    activity_factory: t.Callable[..., Activity],
    cohort_factory: t.Callable[..., Cohort],
) -> Classroom:
    """A cohort with two courses, a mentor and two students.

    ``course`` has four evaluable activities across two lessons plus a lecture.
    """
    teacher = user_factory(name="Grace Teacher", role=UserRole.Teacher)
    admin = user_factory(name="Alan Admin", role=UserRole.AdminTeacher)
    mentor = user_factory(name="Mona Mentor", role=UserRole.Teacher)
    outsider = user_factory(name="Otto Outsider", role=UserRole.Teacher)

    course = course_factory("Algebra I")
    other_course = course_factory("Geometry")
    activities = [
        activity_factory(course.course_id, ActivityKind.Quiz, lesson_position=0, position=0),
        activity_factory(course.course_id, ActivityKind.GradedAssignment, lesson_position=0, position=1),
        activity_factory(course.course_id, ActivityKind.Quiz, lesson_position=1, position=0),
        activity_factory(course.course_id, ActivityKind.GradedAssignment, lesson_position=1, position=1),
    ]
    activity_factory(course.course_id, ActivityKind.Lecture, lesson_position=0, position=2)

    students = [user_factory(name="Ana Student"), user_factory(name="Ben Student")]
    cohort = cohort_factory(teacher, courses=[course, other_course], students=students, mentors=[mentor])
    return Classroom(
        teacher=teacher,
        admin=admin,
        mentor=mentor,
        outsider=outsider,
        course=course,
        other_course=other_course,
        activities=activities,
        students=students,
        cohort=cohort,
    )
