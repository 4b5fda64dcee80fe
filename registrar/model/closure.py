import datetime
import enum

from .base import WithMtime
from .id import CohortID, CourseID, EnrollmentID, UserID


class ClosureStatus(enum.Enum):
    Open = "open"
    Closed = "closed"


class CourseClosure(WithMtime):
    enrollment_id: EnrollmentID
    course_id: CourseID
    cohort_id: CohortID
    student_id: UserID

    status: ClosureStatus = ClosureStatus.Open
    auto_grade: float | None = None
    final_grade: float | None = None
    manual_override: bool = False
    pending_ungraded_count: int = 0
    graded_count: int = 0
    total_evaluable: int = 0

    closed_at: datetime.datetime | None = None
    closed_by: UserID | None = None
    reopened_at: datetime.datetime | None = None
    reopened_by: UserID | None = None

    @property
    def is_closed(self) -> bool:
        return self.status is ClosureStatus.Closed
