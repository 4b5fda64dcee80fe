import datetime
import enum

from .base import WithCtime
from .id import ActivityID, CohortID, CourseID, SubmissionID, UserID


class SubmissionStatus(enum.Enum):
    Pending = "pending"
    Graded = "graded"
    Late = "late"


class Submission(WithCtime):
    submission_id: SubmissionID
    cohort_id: CohortID
    student_id: UserID
    course_id: CourseID
    activity_id: ActivityID

    status: SubmissionStatus = SubmissionStatus.Pending
    grade: float | None = None
    submitted_at: datetime.datetime | None = None
    graded_at: datetime.datetime | None = None

    @property
    def is_graded(self) -> bool:
        return self.grade is not None or self.status is SubmissionStatus.Graded
