"""Tests for registrar.storage.closure module."""

from __future__ import annotations

import datetime

import pytest
from sqlalchemy.orm import Session

from registrar.model import ClosureStatus, CohortID, UserID
from registrar.storage import closure as closure_storage

from ..conftest import Classroom, NOW

LATER = NOW + datetime.timedelta(hours=2)


class TestEnrollmentID(object):
    """Tests for closure_storage.enrollment_id()."""

    def test_stable(self) -> None:
        """The same cohort and student always map to the same key."""
        cohort_id, student_id = CohortID(), UserID()

        assert closure_storage.enrollment_id(cohort_id, student_id) == closure_storage.enrollment_id(
            cohort_id, student_id
        )

    def test_distinct(self) -> None:
        """Different students or cohorts get different keys."""
        cohort_id, student_id = CohortID(), UserID()
        key = closure_storage.enrollment_id(cohort_id, student_id)

        assert key != closure_storage.enrollment_id(cohort_id, UserID())
        assert key != closure_storage.enrollment_id(CohortID(), student_id)


class TestUpsert(object):
    """Tests for closure_storage.upsert()."""

    def test_creates(self, db_session: Session, classroom: Classroom) -> None:
        """upsert() creates a record when none exists."""
        student_id = classroom.student_ids[0]
        key = closure_storage.enrollment_id(classroom.cohort.cohort_id, student_id)

        with db_session.begin():
            record = closure_storage.upsert(
                {
                    "enrollment_id": key,
                    "course_id": classroom.course.course_id,
                    "cohort_id": classroom.cohort.cohort_id,
                    "student_id": student_id,
                    "status": ClosureStatus.Closed,
                    "final_grade": 90.0,
                    "update_time": NOW,
                },
                session=db_session,
            )

        assert record.enrollment_id == key
        assert record.status is ClosureStatus.Closed
        assert record.final_grade == 90.0
        assert record.manual_override is False
        assert record.update_time == NOW

    def test_updates_only_given_fields(self, db_session: Session, classroom: Classroom) -> None:
        """upsert() on an existing record leaves omitted fields untouched."""
        student_id = classroom.student_ids[0]
        key = closure_storage.enrollment_id(classroom.cohort.cohort_id, student_id)
        course_id = classroom.course.course_id

        with db_session.begin():
            closure_storage.upsert(
                {
                    "enrollment_id": key,
                    "course_id": course_id,
                    "cohort_id": classroom.cohort.cohort_id,
                    "student_id": student_id,
                    "status": ClosureStatus.Closed,
                    "final_grade": 90.0,
                    "closed_by": classroom.teacher.user_id,
                    "update_time": NOW,
                },
                session=db_session,
            )
        with db_session.begin():
            record = closure_storage.upsert(
                {
                    "enrollment_id": key,
                    "course_id": course_id,
                    "status": ClosureStatus.Open,
                    "reopened_at": LATER,
                    "update_time": LATER,
                },
                session=db_session,
            )

        assert record.status is ClosureStatus.Open
        assert record.final_grade == 90.0
        assert record.closed_by == classroom.teacher.user_id
        assert record.reopened_at == LATER

    def test_create_requires_owner_fields(self, db_session: Session, classroom: Classroom) -> None:
        """upsert() refuses to create a record without cohort and student."""
        key = closure_storage.enrollment_id(classroom.cohort.cohort_id, classroom.student_ids[0])

        with pytest.raises(ValueError):
            with db_session.begin():
                closure_storage.upsert(
                    {"enrollment_id": key, "course_id": classroom.course.course_id, "update_time": NOW},
                    session=db_session,
                )


class TestFind(object):
    """Tests for closure_storage.find()."""

    def test_filters(self, db_session: Session, classroom: Classroom) -> None:
        """find() narrows by course, student and status."""
        cohort_id = classroom.cohort.cohort_id
        ana, ben = classroom.student_ids
        with db_session.begin():
            for student_id, course_id, status in [
                (ana, classroom.course.course_id, ClosureStatus.Closed),
                (ben, classroom.course.course_id, ClosureStatus.Open),
                (ana, classroom.other_course.course_id, ClosureStatus.Closed),
            ]:
                closure_storage.upsert(
                    {
                        "enrollment_id": closure_storage.enrollment_id(cohort_id, student_id),
                        "course_id": course_id,
                        "cohort_id": cohort_id,
                        "student_id": student_id,
                        "status": status,
                        "update_time": NOW,
                    },
                    session=db_session,
                )

        with db_session.begin():
            everything = closure_storage.find(cohort_id=cohort_id, session=db_session)
            in_course = closure_storage.find(
                cohort_id=cohort_id, course_id=classroom.course.course_id, session=db_session
            )
            closed = closure_storage.find(cohort_id=cohort_id, status=ClosureStatus.Closed, session=db_session)
            for_ben = closure_storage.find(student_id=ben, session=db_session)

        assert len(everything) == 3
        assert {c.student_id for c in in_course} == {ana, ben}
        assert {(c.student_id, c.course_id) for c in closed} == {
            (ana, classroom.course.course_id),
            (ana, classroom.other_course.course_id),
        }
        assert [c.status for c in for_ben] == [ClosureStatus.Open]

    def test_get_missing(self, db_session: Session, classroom: Classroom) -> None:
        """get() returns None when the student was never closed."""
        key = closure_storage.enrollment_id(classroom.cohort.cohort_id, classroom.student_ids[0])

        with db_session.begin():
            assert closure_storage.get(key, classroom.course.course_id, session=db_session) is None
