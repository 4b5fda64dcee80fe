from .base import ValueModel, WithTimestamps
from .id import CohortID, CourseID, UserID


class Cohort(WithTimestamps):
    cohort_id: CohortID
    name: str
    teacher_id: UserID

    course_ids: tuple[CourseID, ...] = ()
    mentor_ids: tuple[UserID, ...] = ()


class MentorAccess(ValueModel):
    """Explicit allow-list of courses a delegated mentor may grade in a cohort.

    An empty ``course_ids`` means the mentor sees no courses at all; a mentor
    with no ``MentorAccess`` entry is unrestricted.
    """

    cohort_id: CohortID
    mentor_id: UserID
    course_ids: frozenset[CourseID] = frozenset()
