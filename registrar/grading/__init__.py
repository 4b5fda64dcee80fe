__all__ = [
    # Aggregation
    "compute_aggregate",
    "GradeAggregate",
    # Transitions
    "effective_status",
    "is_manual_override",
    "is_valid_grade",
    # Authorization & visibility
    "is_authorized",
    "visible_courses",
    # Bulk
    "BulkGroup",
    "BulkResult",
    "GroupFailure",
    # Service
    "GradeSheet",
    "GradeSheetRow",
    "GradingService",
    # Errors
    "GradingError",
    "InvalidGrade",
    "NotClosed",
    "NotFound",
    "NothingToClose",
    "NotOpen",
    "PartialBulkFailure",
    "PendingActivitiesUnacknowledged",
    "StoreUnavailable",
    "Unauthorized",
]

from .aggregate import compute_aggregate, GradeAggregate
from .authz import is_authorized
from .bulk import BulkGroup, BulkResult, GroupFailure
from .errors import GradingError, InvalidGrade, NotClosed, NotFound, NothingToClose, NotOpen, PartialBulkFailure, \
    PendingActivitiesUnacknowledged, StoreUnavailable, Unauthorized
from .service import GradeSheet, GradeSheetRow, GradingService
from .transition import effective_status, is_manual_override, is_valid_grade
from .visibility import visible_courses
