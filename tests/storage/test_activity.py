"""Tests for registrar.storage.activity module."""

from __future__ import annotations

import typing as t

from sqlalchemy.orm import Session

from registrar.model import Activity, ActivityKind, Course, CourseID
from registrar.storage import activity as activity_storage

from ..conftest import Classroom


class TestFindEvaluable(object):
    """Tests for activity_storage.find_evaluable()."""

    def test_excludes_lectures(self, db_session: Session, classroom: Classroom) -> None:
        """Only quizzes and graded assignments count toward the grade."""
        with db_session.begin():
            found = activity_storage.find_evaluable(classroom.course.course_id, session=db_session)
            everything = activity_storage.find(classroom.course.course_id, session=db_session)

        assert [a.activity_id for a in found] == [a.activity_id for a in classroom.activities]
        assert len(everything) == 5
        assert all(a.kind.evaluable for a in found)

    def test_lesson_order(
        self,
        db_session: Session,
        course_factory: t.Callable[..., Course],
        activity_factory: t.Callable[..., Activity],
    ) -> None:
        """Activities come back by lesson position, then activity position."""
        course = course_factory()
        late = activity_factory(course.course_id, ActivityKind.Quiz, lesson_position=2, position=0)
        early = activity_factory(course.course_id, ActivityKind.GradedAssignment, lesson_position=0, position=3)
        middle = activity_factory(course.course_id, ActivityKind.Quiz, lesson_position=1, position=0)

        with db_session.begin():
            found = activity_storage.find_evaluable(course.course_id, session=db_session)

        assert [a.activity_id for a in found] == [early.activity_id, middle.activity_id, late.activity_id]

    def test_unknown_course(self, db_session: Session) -> None:
        with db_session.begin():
            assert activity_storage.find_evaluable(CourseID(), session=db_session) == ()
            assert activity_storage.get_course(CourseID(), session=db_session) is None
