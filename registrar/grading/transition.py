"""Pure closure-state transitions.

These build the field set written to the closure store; persisting them is
``GradingService``'s job. Absence of a record is the implicit Open state.
"""

from __future__ import annotations

import datetime
import math
import numbers
import typing as t

from registrar.model import ClosureStatus, CohortID, CourseClosure, CourseID, EnrollmentID, UserID

from .aggregate import GradeAggregate
from .errors import NotClosed, NotOpen

if t.TYPE_CHECKING:
    from registrar.storage.closure import ClosureUpsertParams

DefaultTolerance: t.Final[float] = 0.01


def effective_status(record: CourseClosure | None) -> ClosureStatus:
    return record.status if record is not None else ClosureStatus.Open


def is_valid_grade(value: t.Any, lower: float = 0.0, upper: float = 100.0) -> bool:
    # bool is an int subclass; True is not a grade
    if value is None or isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    v = float(value)
    return math.isfinite(v) and lower <= v <= upper


def is_manual_override(final_grade: float, auto_grade: float | None, tolerance: float = DefaultTolerance) -> bool:
    return auto_grade is None or abs(final_grade - auto_grade) > tolerance


def close_record(
    *,
    enrollment_id: EnrollmentID,
    cohort_id: CohortID,
    course_id: CourseID,
    student_id: UserID,
    aggregate: GradeAggregate,
    final_grade: float,
    actor_id: UserID,
    now: datetime.datetime,
    tolerance: float = DefaultTolerance,
    current: CourseClosure | None = None,
    require_open: bool = False,
) -> ClosureUpsertParams:
    """Fields for closing a course for one student.

    The grade must already be validated. Reopen audit fields are left as they
    are; a closed record closed again is simply re-stamped.

    Raises:
        NotOpen: If ``require_open`` and ``current`` is already closed
    """
    if require_open and effective_status(current) is ClosureStatus.Closed:
        raise NotOpen(student_id, course_id)

    final = float(final_grade)
    return {
        "enrollment_id": enrollment_id,
        "course_id": course_id,
        "cohort_id": cohort_id,
        "student_id": student_id,
        "status": ClosureStatus.Closed,
        "auto_grade": aggregate.auto_grade,
        "final_grade": final,
        "manual_override": is_manual_override(final, aggregate.auto_grade, tolerance),
        "pending_ungraded_count": aggregate.pending_ungraded_count,
        "graded_count": aggregate.graded_count,
        "total_evaluable": aggregate.total_evaluable,
        "closed_at": now,
        "closed_by": actor_id,
        "update_time": now,
    }


def reopen_record(
    *,
    current: CourseClosure | None,
    student_id: UserID,
    course_id: CourseID,
    aggregate: GradeAggregate,
    actor_id: UserID,
    now: datetime.datetime,
) -> ClosureUpsertParams:
    """Fields for reopening a closed course.

    Grades, the override flag and the closure audit fields stay as history;
    only the pending count and aggregate snapshot are refreshed.

    Raises:
        NotClosed: If there is no record or it is not closed
    """
    if current is None or effective_status(current) is not ClosureStatus.Closed:
        raise NotClosed(student_id, course_id)

    return {
        "enrollment_id": current.enrollment_id,
        "course_id": current.course_id,
        "status": ClosureStatus.Open,
        "pending_ungraded_count": aggregate.pending_ungraded_count,
        "graded_count": aggregate.graded_count,
        "total_evaluable": aggregate.total_evaluable,
        "reopened_at": now,
        "reopened_by": actor_id,
        "update_time": now,
    }
