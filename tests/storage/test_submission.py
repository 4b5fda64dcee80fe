"""Tests for registrar.storage.submission module."""

from __future__ import annotations

import datetime
import typing as t

from sqlalchemy.orm import Session

from registrar.model import Submission, SubmissionStatus
from registrar.storage import submission as submission_storage

from ..conftest import Classroom, NOW


class TestFind(object):
    """Tests for submission_storage.find()."""

    def test_oldest_first(
        self, db_session: Session, classroom: Classroom, submission_factory: t.Callable[..., Submission]
    ) -> None:
        """Untimestamped submissions sort before timestamped ones."""
        ana = classroom.students[0]
        activity = classroom.activities[0]
        newer = submission_factory(classroom.cohort, ana, activity, grade=90, submitted_at=NOW)
        older = submission_factory(
            classroom.cohort, ana, activity, grade=60, submitted_at=NOW - datetime.timedelta(days=1)
        )
        undated = submission_factory(classroom.cohort, ana, activity)

        with db_session.begin():
            found = submission_storage.find(cohort_id=classroom.cohort.cohort_id, session=db_session)

        assert [s.submission_id for s in found] == [undated.submission_id, older.submission_id, newer.submission_id]

    def test_filters(
        self, db_session: Session, classroom: Classroom, submission_factory: t.Callable[..., Submission]
    ) -> None:
        ana, ben = classroom.students
        submission_factory(classroom.cohort, ana, classroom.activities[0], grade=90, submitted_at=NOW)
        submission_factory(classroom.cohort, ben, classroom.activities[1], grade=80, submitted_at=NOW)

        with db_session.begin():
            for_ben = submission_storage.find(
                cohort_id=classroom.cohort.cohort_id, student_id=ben.user_id, session=db_session
            )
            elsewhere = submission_storage.find(
                cohort_id=classroom.cohort.cohort_id, course_id=classroom.other_course.course_id, session=db_session
            )

        assert [s.grade for s in for_ben] == [80.0]
        assert elsewhere == ()


class TestCreate(object):
    def test_defaults_to_pending(self, db_session: Session, classroom: Classroom) -> None:
        activity = classroom.activities[0]

        with db_session.begin():
            submission = submission_storage.create(
                {
                    "cohort_id": classroom.cohort.cohort_id,
                    "student_id": classroom.student_ids[0],
                    "course_id": activity.course_id,
                    "activity_id": activity.activity_id,
                },
                session=db_session,
            )

        assert submission.status is SubmissionStatus.Pending
        assert submission.grade is None
        assert not submission.is_graded
