from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from registrar.core import di
from registrar.model import ActivityID, CohortID, CourseID, Submission, SubmissionID, SubmissionStatus, UserID

from . import Session
from .table import submissions


def get(key: SubmissionID, session: Session = di.Provide["storage.persistent.session"]) -> Submission | None:
    stmt = sqla.select(submissions.__table__).where(submissions.submission_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Submission(**row) if row else None


def find(
    *,
    cohort_id: CohortID,
    course_id: CourseID | None = None,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    """Submissions of a cohort, oldest first.

    Untimestamped submissions sort first; ties keep insertion order. The
    aggregator does its own per-activity deduplication, so callers must not
    rely on this ordering for correctness.
    """
    stmt = (
        sqla.select(submissions.__table__)
        .where(submissions.cohort_id == cohort_id)
        .order_by(submissions.submitted_at.asc().nulls_first(), submissions.create_time, submissions.submission_id)
    )
    if course_id is not None:
        stmt = stmt.where(submissions.course_id == course_id)
    if student_id is not None:
        stmt = stmt.where(submissions.student_id == student_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(Submission(**row) for row in rows)


def create(
    params: SubmissionCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> Submission:
    submission = submissions(
        submission_id=SubmissionID(),
        cohort_id=params["cohort_id"],
        student_id=params["student_id"],
        course_id=params["course_id"],
        activity_id=params["activity_id"],
        status=params.get("status", SubmissionStatus.Pending).value,
        grade=params.get("grade"),
        submitted_at=params.get("submitted_at"),
        graded_at=params.get("graded_at"),
    )
    session.add(submission)
    session.flush()
    return get(submission.submission_id, session=session)  # type: ignore[return-value]


class SubmissionCreateParams(t.TypedDict, total=False):
    cohort_id: t.Required[CohortID]
    student_id: t.Required[UserID]
    course_id: t.Required[CourseID]
    activity_id: t.Required[ActivityID]
    status: SubmissionStatus
    grade: float | None
    submitted_at: datetime.datetime | None
    graded_at: datetime.datetime | None
