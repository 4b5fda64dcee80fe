"""Tests for GradingService.grade_sheet."""

from __future__ import annotations

import typing as t

import pytest

from registrar.grading import GradingService, NotFound, Unauthorized
from registrar.model import ClosureStatus, Submission

from ..conftest import Classroom, NOW


class TestGradeSheet(object):
    def test_rows_follow_roster(
        self, service: GradingService, classroom: Classroom, submission_factory: t.Callable[..., Submission]
    ) -> None:
        ana, ben = classroom.students
        for activity, grade in zip(classroom.activities[:3], (85, 92, 88.5)):
            submission_factory(classroom.cohort, ana, activity, grade=grade, submitted_at=NOW)

        sheet = service.grade_sheet(classroom.cohort.cohort_id, classroom.course.course_id, classroom.teacher)

        assert [r.student.user_id for r in sheet.rows] == [ana.user_id, ben.user_id]
        first, second = sheet.rows
        assert first.aggregate.auto_grade == pytest.approx(88.5)
        assert first.aggregate.pending_ungraded_count == 1
        assert first.suggested_grade == pytest.approx(88.5)
        assert first.status is ClosureStatus.Open
        assert first.closure is None
        assert second.aggregate.auto_grade is None
        assert second.aggregate.pending_ungraded_count == 4
        assert second.suggested_grade is None
        assert sheet.open_count == 2

    def test_closed_rows_suggest_final_grade(
        self, service: GradingService, classroom: Classroom, submission_factory: t.Callable[..., Submission]
    ) -> None:
        ana = classroom.students[0]
        submission_factory(classroom.cohort, ana, classroom.activities[0], grade=60, submitted_at=NOW)
        ids = classroom.cohort.cohort_id, classroom.course.course_id
        service.close(*ids, ana.user_id, 75, classroom.teacher)

        sheet = service.grade_sheet(*ids, classroom.teacher)

        row = sheet.rows[0]
        assert row.status is ClosureStatus.Closed
        assert row.closure is not None and row.closure.final_grade == 75.0
        assert row.suggested_grade == 75.0
        assert row.aggregate.auto_grade == 60.0
        assert sheet.open_count == 1

    def test_reopened_rows_keep_previous_final_grade(self, service: GradingService, classroom: Classroom) -> None:
        ana = classroom.students[0]
        ids = classroom.cohort.cohort_id, classroom.course.course_id
        service.close(*ids, ana.user_id, 75, classroom.teacher)
        service.reopen(*ids, ana.user_id, classroom.teacher)

        row = service.grade_sheet(*ids, classroom.teacher).rows[0]

        assert row.status is ClosureStatus.Open
        assert row.suggested_grade == 75.0

    def test_mentor_may_read(self, service: GradingService, classroom: Classroom) -> None:
        sheet = service.grade_sheet(classroom.cohort.cohort_id, classroom.course.course_id, classroom.mentor)

        assert len(sheet.rows) == 2

    def test_outsider_may_not_read(self, service: GradingService, classroom: Classroom) -> None:
        with pytest.raises(Unauthorized):
            service.grade_sheet(classroom.cohort.cohort_id, classroom.course.course_id, classroom.outsider)

    def test_unattached_course(
        self, service: GradingService, classroom: Classroom, course_factory: t.Callable[..., t.Any]
    ) -> None:
        with pytest.raises(NotFound):
            service.grade_sheet(classroom.cohort.cohort_id, course_factory("Chemistry").course_id, classroom.teacher)
