from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from registrar.core import di
from registrar.model import ClosureStatus, CohortID, CourseClosure, CourseID, EnrollmentID, UserID

from . import Session
from .table import course_closures


def enrollment_id(cohort_id: CohortID, student_id: UserID) -> EnrollmentID:
    """The enrollment key of a student in a cohort; stable across calls and processes."""
    return EnrollmentID.derive(cohort_id.key, student_id.key)


def get(
    enrollment_id: EnrollmentID,
    course_id: CourseID,
    session: Session = di.Provide["storage.persistent.session"],
) -> CourseClosure | None:
    stmt = sqla.select(course_closures.__table__).where(
        course_closures.enrollment_id == enrollment_id,
        course_closures.course_id == course_id,
    )
    row = session.execute(stmt).mappings().one_or_none()
    return CourseClosure(**row) if row else None


def find(
    *,
    cohort_id: CohortID | None = None,
    course_id: CourseID | None = None,
    student_id: UserID | None = None,
    status: ClosureStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[CourseClosure, ...]:
    stmt = sqla.select(course_closures.__table__).order_by(course_closures.enrollment_id, course_closures.course_id)
    if cohort_id is not None:
        stmt = stmt.where(course_closures.cohort_id == cohort_id)
    if course_id is not None:
        stmt = stmt.where(course_closures.course_id == course_id)
    if student_id is not None:
        stmt = stmt.where(course_closures.student_id == student_id)
    if status is not None:
        stmt = stmt.where(course_closures.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(CourseClosure(**row) for row in rows)


def upsert(
    params: ClosureUpsertParams, session: Session = di.Provide["storage.persistent.session"]
) -> CourseClosure:
    """Create the closure record if absent, otherwise update it.

    Only the keys present in ``params`` are written; fields the caller left
    out keep their stored values.
    """
    key = params["enrollment_id"], params["course_id"]
    values: dict[str, t.Any] = {}
    for field, value in params.items():
        if field in ("enrollment_id", "course_id"):
            continue
        values[field] = value.value if field == "status" else value  # type: ignore[union-attr]

    stmt = sqla.select(course_closures).where(
        course_closures.enrollment_id == key[0],
        course_closures.course_id == key[1],
    )
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is None:
        for required in ("cohort_id", "student_id"):
            if required not in values:
                raise ValueError(f"{required} is required to create a closure record")
        session.add(course_closures(enrollment_id=key[0], course_id=key[1], **values))
    else:
        for field, value in values.items():
            setattr(existing, field, value)
    session.flush()
    return get(*key, session=session)  # type: ignore[return-value]


class ClosureUpsertParams(t.TypedDict, total=False):
    enrollment_id: t.Required[EnrollmentID]
    course_id: t.Required[CourseID]
    cohort_id: CohortID
    student_id: UserID
    status: ClosureStatus
    auto_grade: float | None
    final_grade: float | None
    manual_override: bool
    pending_ungraded_count: int
    graded_count: int
    total_evaluable: int
    closed_at: datetime.datetime | None
    closed_by: UserID | None
    reopened_at: datetime.datetime | None
    reopened_by: UserID | None
    update_time: datetime.datetime
