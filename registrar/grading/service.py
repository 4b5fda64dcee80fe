"""Persisted course closure operations."""

from __future__ import annotations

import contextlib
import logging
import threading
import typing as t
from collections import defaultdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from registrar.core.config import GradingSettings
from registrar.core.provider import TimestampProvider
from registrar.model import ClosureStatus, Cohort, CohortID, CourseClosure, CourseID, EnrollmentID, \
    EvaluableActivity, MentorAccess, Submission, User, UserID, ValueModel
from registrar.storage import activity as activity_storage
from registrar.storage import closure as closure_storage
from registrar.storage import cohort as cohort_storage
from registrar.storage import mentor as mentor_storage
from registrar.storage import submission as submission_storage

from . import bulk, transition
from .aggregate import compute_aggregate, GradeAggregate
from .authz import is_authorized, is_mentor
from .errors import InvalidGrade, NotFound, NothingToClose, PendingActivitiesUnacknowledged, StoreUnavailable, \
    Unauthorized
from .visibility import visible_courses

if t.TYPE_CHECKING:
    from registrar.storage.closure import ClosureUpsertParams

logger = logging.getLogger(__name__)


class GradeSheetRow(ValueModel):
    student: User
    enrollment_id: EnrollmentID
    aggregate: GradeAggregate
    closure: CourseClosure | None = None
    status: ClosureStatus = ClosureStatus.Open
    suggested_grade: float | None = None


class GradeSheet(ValueModel):
    cohort_id: CohortID
    course_id: CourseID
    rows: tuple[GradeSheetRow, ...] = ()

    @property
    def open_count(self) -> int:
        return sum(1 for r in self.rows if r.status is ClosureStatus.Open)


class GradingService(object):
    """Close, reopen and bulk-close course grades for the students of a cohort.

    Every operation runs in its own transaction on ``session``, which must not
    already be in one. Each bulk group gets a transaction of its own. Store
    errors surface as ``StoreUnavailable`` with the transaction rolled back.
    """

    def __init__(
        self,
        session: Session,
        utcnow: TimestampProvider,
        settings: GradingSettings | None = None,
    ) -> None:
        self.session = session
        self.utcnow = utcnow
        self.settings = settings or GradingSettings()

    @contextlib.contextmanager
    def transaction(self) -> t.Iterator[Session]:
        try:
            with self.session.begin():
                yield self.session
        except SQLAlchemyError as e:
            logger.warning("store operation failed", extra={"error": str(e)})
            raise StoreUnavailable(str(e)) from e

    def close(
        self,
        cohort_id: CohortID,
        course_id: CourseID,
        student_id: UserID,
        final_grade: float,
        actor: User,
    ) -> CourseClosure:
        """Finalize ``final_grade`` for one student.

        The automatic grade is recomputed from the stored submissions. Closing
        does not check for ungraded activities; the returned record's
        ``pending_ungraded_count`` tells the caller whether to warn.

        Raises:
            InvalidGrade: If the grade is not a finite number within range
            Unauthorized: If the actor is neither the cohort's teacher nor an admin teacher
            NotFound: If the cohort, course attachment or student enrollment is missing
            StoreUnavailable: If the store could not be read or written
        """
        self.check_grades({student_id: final_grade})

        with self.transaction() as session:
            self.require_course(cohort_id, course_id, actor, write=True, session=session)
            if not cohort_storage.has_student(cohort_id, student_id, session=session):
                raise NotFound(f"{student_id} is not enrolled in {cohort_id}")

            aggregate = self.aggregate(cohort_id, course_id, student_id, session=session)
            params = transition.close_record(
                enrollment_id=closure_storage.enrollment_id(cohort_id, student_id),
                cohort_id=cohort_id,
                course_id=course_id,
                student_id=student_id,
                aggregate=aggregate,
                final_grade=final_grade,
                actor_id=actor.user_id,
                now=self.utcnow(),
                tolerance=self.settings.override_tolerance,
            )
            record = closure_storage.upsert(params, session=session)

        logger.info(
            "closed course",
            extra={
                "cohort_id": cohort_id,
                "course_id": course_id,
                "student_id": student_id,
                "final_grade": record.final_grade,
                "auto_grade": record.auto_grade,
                "manual_override": record.manual_override,
                "pending_ungraded_count": record.pending_ungraded_count,
                "actor_id": actor.user_id,
            },
        )
        return record

    def reopen(
        self,
        cohort_id: CohortID,
        course_id: CourseID,
        student_id: UserID,
        actor: User,
    ) -> CourseClosure:
        """Reopen a closed course; prior grades are kept as history.

        Raises:
            NotClosed: If the course was never closed for the student or is open again
            Unauthorized: If the actor is neither the cohort's teacher nor an admin teacher
            StoreUnavailable: If the store could not be read or written
        """
        with self.transaction() as session:
            self.require_course(cohort_id, course_id, actor, write=True, session=session)
            enrollment_id = closure_storage.enrollment_id(cohort_id, student_id)
            current = closure_storage.get(enrollment_id, course_id, session=session)
            aggregate = self.aggregate(cohort_id, course_id, student_id, session=session)
            params = transition.reopen_record(
                current=current,
                student_id=student_id,
                course_id=course_id,
                aggregate=aggregate,
                actor_id=actor.user_id,
                now=self.utcnow(),
            )
            record = closure_storage.upsert(params, session=session)

        logger.info(
            "reopened course",
            extra={
                "cohort_id": cohort_id,
                "course_id": course_id,
                "student_id": student_id,
                "pending_ungraded_count": record.pending_ungraded_count,
                "actor_id": actor.user_id,
            },
        )
        return record

    def close_all(
        self,
        cohort_id: CohortID,
        course_id: CourseID,
        final_grades: t.Mapping[UserID, float],
        actor: User,
        *,
        acknowledge_pending: bool = False,
        cancel: threading.Event | None = None,
    ) -> bulk.BulkResult:
        """Close the course for every roster student whose record is still open.

        Every target is validated before anything is written. Records are then
        committed in groups of ``bulk_group_size`` in roster order; a group that
        fails is reported in the result and does not stop later groups.

        Args:
            final_grades: Final grade per student; every open student needs one
            acknowledge_pending: Close students with ungraded activities anyway
            cancel: When set, no further group is started

        Raises:
            Unauthorized: If the actor may not close this cohort's course
            NothingToClose: If no roster student has an open record
            InvalidGrade: Listing every target whose grade is missing or invalid
            PendingActivitiesUnacknowledged: Listing targets with ungraded activities
            StoreUnavailable: If the validation reads failed
        """
        with self.transaction() as session:
            self.require_course(cohort_id, course_id, actor, write=True, session=session)

            students = cohort_storage.find_students(cohort_id, session=session)
            closures = self.closures_by_student(cohort_id, course_id, session=session)
            targets = [
                s.user_id
                for s in students
                if transition.effective_status(closures.get(s.user_id)) is ClosureStatus.Open
            ]
            if not targets:
                raise NothingToClose(cohort_id, course_id)

            self.check_grades({sid: final_grades.get(sid) for sid in targets})

            aggregates = self.aggregate_many(cohort_id, course_id, targets, session=session)
            pending = [
                (sid, aggregates[sid].pending_ungraded_count)
                for sid in targets
                if aggregates[sid].pending_ungraded_count > 0
            ]
            if pending and not acknowledge_pending:
                raise PendingActivitiesUnacknowledged(pending)

            now = self.utcnow()
            records = [
                transition.close_record(
                    enrollment_id=closure_storage.enrollment_id(cohort_id, sid),
                    cohort_id=cohort_id,
                    course_id=course_id,
                    student_id=sid,
                    aggregate=aggregates[sid],
                    final_grade=final_grades[sid],
                    actor_id=actor.user_id,
                    now=now,
                    tolerance=self.settings.override_tolerance,
                    current=closures.get(sid),
                    require_open=True,
                )
                for sid in targets
            ]

        logger.info(
            "closing course in bulk",
            extra={
                "cohort_id": cohort_id,
                "course_id": course_id,
                "students": len(records),
                "group_size": self.settings.bulk_group_size,
                "pending_acknowledged": len(pending),
                "actor_id": actor.user_id,
            },
        )
        result = bulk.commit_groups(records, self.settings.bulk_group_size, self.commit_group, cancel=cancel)
        logger.info(
            "bulk close finished",
            extra={
                "cohort_id": cohort_id,
                "course_id": course_id,
                "closed_count": result.closed_count,
                "failed_groups": [g.index for g in result.failed_groups],
                "skipped_groups": [g.index for g in result.skipped_groups],
            },
        )
        return result

    def commit_group(self, records: t.Sequence[ClosureUpsertParams]) -> None:
        with self.transaction() as session:
            for params in records:
                closure_storage.upsert(params, session=session)

    def visible_courses(self, cohort_id: CohortID, actor: User) -> frozenset[CourseID]:
        with self.transaction() as session:
            cohort = self.get_cohort(cohort_id, session=session)
            return self.visible_to(cohort, actor, session=session)

    def set_mentor_access(
        self,
        cohort_id: CohortID,
        mentor_id: UserID,
        course_ids: t.Iterable[CourseID],
        actor: User,
    ) -> MentorAccess:
        """Restrict a delegated mentor to ``course_ids``; an empty set hides every course."""
        allowed = frozenset(course_ids)
        with self.transaction() as session:
            cohort = self.get_cohort(cohort_id, session=session)
            if not is_authorized(actor, cohort):
                raise Unauthorized(actor.user_id, cohort_id)
            if mentor_id not in cohort.mentor_ids:
                raise NotFound(f"{mentor_id} is not a mentor of {cohort_id}")
            if unknown := allowed - frozenset(cohort.course_ids):
                raise NotFound(f"course(s) not attached to {cohort_id}: {', '.join(sorted(unknown))}")
            access = mentor_storage.set_allowed_courses(cohort_id, mentor_id, allowed, session=session)

        logger.info(
            "restricted mentor",
            extra={"cohort_id": cohort_id, "mentor_id": mentor_id, "course_ids": allowed, "actor_id": actor.user_id},
        )
        return access

    def clear_mentor_access(self, cohort_id: CohortID, mentor_id: UserID, actor: User) -> bool:
        """Lift a mentor's restriction so they see every attached course again."""
        with self.transaction() as session:
            cohort = self.get_cohort(cohort_id, session=session)
            if not is_authorized(actor, cohort):
                raise Unauthorized(actor.user_id, cohort_id)
            cleared = mentor_storage.clear(cohort_id, mentor_id, session=session)

        logger.info(
            "cleared mentor restriction",
            extra={"cohort_id": cohort_id, "mentor_id": mentor_id, "cleared": cleared, "actor_id": actor.user_id},
        )
        return cleared

    def grade_sheet(self, cohort_id: CohortID, course_id: CourseID, actor: User) -> GradeSheet:
        """Aggregate and closure state of every roster student for one course.

        Readable by anyone the course is visible to, mentors included.
        """
        with self.transaction() as session:
            self.require_course(cohort_id, course_id, actor, write=False, session=session)
            students = cohort_storage.find_students(cohort_id, session=session)
            closures = self.closures_by_student(cohort_id, course_id, session=session)
            aggregates = self.aggregate_many(cohort_id, course_id, [s.user_id for s in students], session=session)

        rows: list[GradeSheetRow] = []
        for student in students:
            closure = closures.get(student.user_id)
            aggregate = aggregates[student.user_id]
            suggested = closure.final_grade if closure is not None and closure.final_grade is not None else None
            rows.append(
                GradeSheetRow(
                    student=student,
                    enrollment_id=closure_storage.enrollment_id(cohort_id, student.user_id),
                    aggregate=aggregate,
                    closure=closure,
                    status=transition.effective_status(closure),
                    suggested_grade=suggested if suggested is not None else aggregate.auto_grade,
                )
            )
        return GradeSheet(cohort_id=cohort_id, course_id=course_id, rows=tuple(rows))

    # helpers; all expect to run inside self.transaction()

    def check_grades(self, grades: t.Mapping[UserID, t.Any]) -> None:
        lower, upper = self.settings.min_grade, self.settings.max_grade
        if invalid := {sid: g for sid, g in grades.items() if not transition.is_valid_grade(g, lower, upper)}:
            raise InvalidGrade(invalid, lower, upper)

    def get_cohort(self, cohort_id: CohortID, *, session: Session) -> Cohort:
        cohort = cohort_storage.get(cohort_id, session=session)
        if cohort is None:
            raise NotFound(f"cohort {cohort_id} not found")
        return cohort

    def visible_to(self, cohort: Cohort, actor: User, *, session: Session) -> frozenset[CourseID]:
        allowed = None
        if is_mentor(actor, cohort) and not is_authorized(actor, cohort):
            allowed = mentor_storage.get_allowed_courses(cohort.cohort_id, actor.user_id, session=session)
        return visible_courses(cohort, actor, allowed)

    def require_course(
        self, cohort_id: CohortID, course_id: CourseID, actor: User, *, write: bool, session: Session
    ) -> Cohort:
        cohort = self.get_cohort(cohort_id, session=session)
        if write and not is_authorized(actor, cohort):
            raise Unauthorized(actor.user_id, cohort_id, course_id)
        if course_id not in cohort.course_ids:
            raise NotFound(f"course {course_id} is not attached to {cohort_id}")
        if course_id not in self.visible_to(cohort, actor, session=session):
            raise Unauthorized(actor.user_id, cohort_id, course_id)
        return cohort

    def aggregate(
        self, cohort_id: CohortID, course_id: CourseID, student_id: UserID, *, session: Session
    ) -> GradeAggregate:
        activities = activity_storage.find_evaluable(course_id, session=session)
        submissions = submission_storage.find(
            cohort_id=cohort_id, course_id=course_id, student_id=student_id, session=session
        )
        return compute_aggregate(activities, submissions)

    def aggregate_many(
        self, cohort_id: CohortID, course_id: CourseID, student_ids: t.Sequence[UserID], *, session: Session
    ) -> dict[UserID, GradeAggregate]:
        activities: tuple[EvaluableActivity, ...] = activity_storage.find_evaluable(course_id, session=session)
        by_student: dict[UserID, list[Submission]] = defaultdict(list)
        for submission in submission_storage.find(cohort_id=cohort_id, course_id=course_id, session=session):
            by_student[submission.student_id].append(submission)
        return {sid: compute_aggregate(activities, by_student[sid]) for sid in student_ids}

    def closures_by_student(
        self, cohort_id: CohortID, course_id: CourseID, *, session: Session
    ) -> dict[UserID, CourseClosure]:
        found = closure_storage.find(cohort_id=cohort_id, course_id=course_id, session=session)
        return {c.student_id: c for c in found}
