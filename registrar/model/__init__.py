__all__ = [
    # Base
    "BaseModel",
    "ValueModel",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "ShortUUIDKey",
    "UserID",
    "CohortID",
    "CourseID",
    "ActivityID",
    "SubmissionID",
    "EnrollmentID",
    # Users
    "User",
    "UserRole",
    # Cohorts
    "Cohort",
    "MentorAccess",
    # Courses & activities
    "Course",
    "Activity",
    "ActivityKind",
    "EvaluableActivity",
    # Submissions
    "Submission",
    "SubmissionStatus",
    # Closures
    "ClosureStatus",
    "CourseClosure",
]

from .activity import Activity, ActivityKind, Course, EvaluableActivity
from .base import BaseModel, ValueModel, WithCtime, WithMtime, WithTimestamps
from .closure import ClosureStatus, CourseClosure
from .cohort import Cohort, MentorAccess
from .enum import DeploymentEnvironment
from .id import ActivityID, CohortID, CourseID, EnrollmentID, ShortUUIDKey, SubmissionID, UserID
from .submission import Submission, SubmissionStatus
from .user import User, UserRole
