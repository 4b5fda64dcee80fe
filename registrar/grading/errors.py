"""Exceptions raised by grading and course closure operations."""

from __future__ import annotations

import typing as t

from registrar.model import CohortID, CourseID, UserID

if t.TYPE_CHECKING:
    from .bulk import BulkResult


class GradingError(Exception):
    """Error during a grading or closure operation."""

    pass


class InvalidGrade(GradingError):
    """One or more final grades are missing, non-finite or out of range.

    ``offenders`` maps each rejected student to the value that was supplied
    for them (None when no grade was supplied at all).
    """

    def __init__(self, offenders: t.Mapping[UserID, t.Any], lower: float = 0.0, upper: float = 100.0):
        self.offenders = dict(offenders)
        self.lower = lower
        self.upper = upper
        listed = ", ".join(f"{k}={v!r}" for k, v in self.offenders.items())
        super().__init__(f"final grade must be a finite number in [{lower:g}, {upper:g}]: {listed}")


class Unauthorized(GradingError):
    """The actor may not read or change closures for this cohort or course."""

    def __init__(self, actor_id: UserID, cohort_id: CohortID, course_id: CourseID | None = None):
        self.actor_id = actor_id
        self.cohort_id = cohort_id
        self.course_id = course_id
        target = f"{cohort_id}/{course_id}" if course_id else str(cohort_id)
        super().__init__(f"{actor_id} is not authorized for {target}")


class NotFound(GradingError):
    """A cohort, student or user the operation names does not exist."""

    pass


class IllegalTransition(GradingError):
    def __init__(self, student_id: UserID, course_id: CourseID, message: str):
        self.student_id = student_id
        self.course_id = course_id
        super().__init__(f"{message}: student={student_id} course={course_id}")


class NotClosed(IllegalTransition):
    """Reopen was requested for a record that is not closed (or does not exist)."""

    def __init__(self, student_id: UserID, course_id: CourseID):
        super().__init__(student_id, course_id, "course is not closed")


class NotOpen(IllegalTransition):
    """Close was requested through the bulk path for a record that is already closed."""

    def __init__(self, student_id: UserID, course_id: CourseID):
        super().__init__(student_id, course_id, "course is not open")


class PendingActivitiesUnacknowledged(GradingError):
    """Bulk close targets students with ungraded activities and the caller did not acknowledge them."""

    def __init__(self, pending: t.Sequence[tuple[UserID, int]]):
        self.pending = list(pending)
        super().__init__(f"{len(self.pending)} student(s) have ungraded activities; acknowledge to close anyway")


class NothingToClose(GradingError):
    """Every roster student already has a closed record for the course."""

    def __init__(self, cohort_id: CohortID, course_id: CourseID):
        self.cohort_id = cohort_id
        self.course_id = course_id
        super().__init__(f"no open records for {cohort_id}/{course_id}")


class StoreUnavailable(GradingError):
    """A read or write against the backing store failed; nothing was changed by this operation."""

    pass


class PartialBulkFailure(GradingError):
    """Some bulk groups committed and some did not; ``result`` names the failed groups for retry."""

    def __init__(self, result: BulkResult):
        self.result = result
        failed = ", ".join(str(f.index) for f in result.failed_groups)
        super().__init__(f"closed {result.closed_count} record(s); group(s) {failed} failed")
