import enum

from .base import BaseModel, ValueModel
from .id import ActivityID, CourseID


class ActivityKind(enum.Enum):
    Lecture = "lecture"
    Quiz = "quiz"
    GradedAssignment = "graded_assignment"

    @property
    def evaluable(self) -> bool:
        return self is not ActivityKind.Lecture


class Course(BaseModel):
    course_id: CourseID
    title: str


class Activity(BaseModel):
    activity_id: ActivityID
    course_id: CourseID
    kind: ActivityKind
    title: str
    lesson_position: int = 0
    position: int = 0


class EvaluableActivity(ValueModel):
    course_id: CourseID
    activity_id: ActivityID
    kind: ActivityKind

    @property
    def identity(self) -> tuple[CourseID, ActivityID]:
        return self.course_id, self.activity_id
