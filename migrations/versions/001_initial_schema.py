"""Initial schema for course closure and grade aggregation

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import Boolean, DateTime, Float, Integer, JSON, String

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None

Timestamp = DateTime(timezone=True)


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("email", String, unique=True, nullable=False),
        Column("name", String, nullable=False),
        Column("role", String, server_default="student", nullable=False),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
        Column("update_time", Timestamp, server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    # Courses & activities
    op.create_table(
        "courses",
        Column("course_id", String(22), primary_key=True),
        Column("title", String, nullable=False),
    )
    op.create_table(
        "activities",
        Column("activity_id", String(22), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("kind", String, nullable=False),
        Column("title", String, nullable=False),
        Column("lesson_position", Integer, server_default="0", nullable=False),
        Column("position", Integer, server_default="0", nullable=False),
    )
    op.create_index("ix_activities_course_order", "activities", ["course_id", "lesson_position", "position"])

    # Cohorts
    op.create_table(
        "cohorts",
        Column("cohort_id", String(22), primary_key=True),
        Column("name", String, nullable=False),
        Column("teacher_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
        Column("update_time", Timestamp, server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_table(
        "cohort_courses",
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), primary_key=True),
        Column("position", Integer, server_default="0", nullable=False),
    )
    op.create_table(
        "cohort_mentors",
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), primary_key=True),
        Column("mentor_id", String(22), ForeignKey("users.user_id"), primary_key=True),
    )
    op.create_table(
        "cohort_students",
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), primary_key=True),
        Column("student_id", String(22), ForeignKey("users.user_id"), primary_key=True),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )
    op.create_table(
        "mentor_access",
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), primary_key=True),
        Column("mentor_id", String(22), ForeignKey("users.user_id"), primary_key=True),
        Column("course_ids", JSON, nullable=False),
        Column("update_time", Timestamp, server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    # Submissions
    op.create_table(
        "submissions",
        Column("submission_id", String(22), primary_key=True),
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("course_id", String(22), ForeignKey("courses.course_id"), nullable=False),
        Column("activity_id", String(22), ForeignKey("activities.activity_id"), nullable=False),
        Column("status", String, server_default="pending", nullable=False),
        Column("grade", Float, nullable=True),
        Column("submitted_at", Timestamp, nullable=True),
        Column("graded_at", Timestamp, nullable=True),
        Column("create_time", Timestamp, server_default=f.now(), nullable=False),
    )
    op.create_index("ix_submissions_cohort_course", "submissions", ["cohort_id", "course_id", "student_id"])

    # Course closures
    op.create_table(
        "course_closures",
        Column("enrollment_id", String(22), primary_key=True),
        Column("course_id", String(22), ForeignKey("courses.course_id"), primary_key=True),
        Column("cohort_id", String(22), ForeignKey("cohorts.cohort_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("status", String, server_default="open", nullable=False),
        Column("auto_grade", Float, nullable=True),
        Column("final_grade", Float, nullable=True),
        Column("manual_override", Boolean, server_default="false", nullable=False),
        Column("pending_ungraded_count", Integer, server_default="0", nullable=False),
        Column("graded_count", Integer, server_default="0", nullable=False),
        Column("total_evaluable", Integer, server_default="0", nullable=False),
        Column("closed_at", Timestamp, nullable=True),
        Column("closed_by", String(22), ForeignKey("users.user_id"), nullable=True),
        Column("reopened_at", Timestamp, nullable=True),
        Column("reopened_by", String(22), ForeignKey("users.user_id"), nullable=True),
        Column("update_time", Timestamp, server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_index("ix_course_closures_cohort_course", "course_closures", ["cohort_id", "course_id"])


def downgrade() -> None:
    op.drop_index("ix_course_closures_cohort_course", table_name="course_closures")
    op.drop_table("course_closures")
    op.drop_index("ix_submissions_cohort_course", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("mentor_access")
    op.drop_table("cohort_students")
    op.drop_table("cohort_mentors")
    op.drop_table("cohort_courses")
    op.drop_table("cohorts")
    op.drop_index("ix_activities_course_order", table_name="activities")
    op.drop_table("activities")
    op.drop_table("courses")
    op.drop_table("users")
