import datetime

from sqlalchemy import ForeignKey, func, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass

from registrar.model import ActivityID, CohortID, CourseID, EnrollmentID, SubmissionID, UserID

from .type import ShortUUIDKeyListType, ShortUUIDKeyType, UTCDateTime

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        CohortID: ShortUUIDKeyType(CohortID),
        CourseID: ShortUUIDKeyType(CourseID),
        ActivityID: ShortUUIDKeyType(ActivityID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        EnrollmentID: ShortUUIDKeyType(EnrollmentID),
        list[CourseID]: ShortUUIDKeyListType(CourseID),
        datetime.datetime: UTCDateTime(),
    }


# Users


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True)
    name: Mapped[str]
    role: Mapped[str] = mapped_column(default="student")
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Courses & Activities


class courses(base):
    __tablename__ = "courses"

    course_id: Mapped[CourseID] = mapped_column(primary_key=True)
    title: Mapped[str]


class activities(base):
    __tablename__ = "activities"

    activity_id: Mapped[ActivityID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    kind: Mapped[str]
    title: Mapped[str]
    lesson_position: Mapped[int] = mapped_column(default=0)
    position: Mapped[int] = mapped_column(default=0)


# Cohorts


class cohorts(base):
    __tablename__ = "cohorts"

    cohort_id: Mapped[CohortID] = mapped_column(primary_key=True)
    name: Mapped[str]
    teacher_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class cohort_courses(base):
    __tablename__ = "cohort_courses"

    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"), primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"), primary_key=True)
    position: Mapped[int] = mapped_column(default=0)


class cohort_mentors(base):
    __tablename__ = "cohort_mentors"

    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"), primary_key=True)
    mentor_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), primary_key=True)


class cohort_students(base):
    __tablename__ = "cohort_students"

    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"), primary_key=True)
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), primary_key=True)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class mentor_access(base):
    """Per-cohort course allow-list for a delegated mentor.

    A missing row means the mentor is unrestricted; a row with an empty
    ``course_ids`` list means the mentor sees nothing.
    """

    __tablename__ = "mentor_access"

    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"), primary_key=True)
    mentor_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), primary_key=True)
    course_ids: Mapped[list[CourseID]] = mapped_column(default_factory=list)
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Submissions


class submissions(base):
    __tablename__ = "submissions"

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"))
    activity_id: Mapped[ActivityID] = mapped_column(ForeignKey("activities.activity_id"))

    status: Mapped[str] = mapped_column(default="pending")
    grade: Mapped[float | None] = mapped_column(default=None)
    submitted_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    graded_at: Mapped[datetime.datetime | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Course closures


class course_closures(base):
    __tablename__ = "course_closures"

    enrollment_id: Mapped[EnrollmentID] = mapped_column(primary_key=True)
    course_id: Mapped[CourseID] = mapped_column(ForeignKey("courses.course_id"), primary_key=True)
    cohort_id: Mapped[CohortID] = mapped_column(ForeignKey("cohorts.cohort_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))

    status: Mapped[str] = mapped_column(default="open")
    auto_grade: Mapped[float | None] = mapped_column(default=None)
    final_grade: Mapped[float | None] = mapped_column(default=None)
    manual_override: Mapped[bool] = mapped_column(default=False)
    pending_ungraded_count: Mapped[int] = mapped_column(default=0)
    graded_count: Mapped[int] = mapped_column(default=0)
    total_evaluable: Mapped[int] = mapped_column(default=0)

    closed_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    closed_by: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)
    reopened_at: Mapped[datetime.datetime | None] = mapped_column(default=None)
    reopened_by: Mapped[UserID | None] = mapped_column(ForeignKey("users.user_id"), default=None)

    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
