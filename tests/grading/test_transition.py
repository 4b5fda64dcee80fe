"""Tests for registrar.grading.transition."""

from __future__ import annotations

import datetime
import math

import pytest

from registrar.grading import effective_status, GradeAggregate, is_manual_override, is_valid_grade, NotClosed, \
    NotOpen
from registrar.grading.transition import close_record, reopen_record
from registrar.model import ClosureStatus, CohortID, CourseClosure, CourseID, EnrollmentID, UserID

NOW = datetime.datetime(2026, 3, 2, 15, 30, tzinfo=datetime.UTC)
LATER = NOW + datetime.timedelta(days=3)


def closure(status: ClosureStatus, **kwargs: object) -> CourseClosure:
    values = {
        "enrollment_id": EnrollmentID(),
        "course_id": CourseID(),
        "cohort_id": CohortID(),
        "student_id": UserID(),
        "status": status,
        "update_time": NOW,
        **kwargs,
    }
    return CourseClosure(**values)  # type: ignore[arg-type]


class TestEffectiveStatus(object):
    def test_missing_record_is_open(self) -> None:
        assert effective_status(None) is ClosureStatus.Open

    def test_record_status(self) -> None:
        assert effective_status(closure(ClosureStatus.Closed)) is ClosureStatus.Closed
        assert effective_status(closure(ClosureStatus.Open)) is ClosureStatus.Open


class TestIsValidGrade(object):
    @pytest.mark.parametrize("value", [0, 0.0, 50, 88.5, 100, 100.0])
    def test_accepts_in_range(self, value: float) -> None:
        assert is_valid_grade(value)

    @pytest.mark.parametrize(
        "value",
        [-0.1, 100.01, math.nan, math.inf, -math.inf, None, True, False, "90", [90]],
    )
    def test_rejects(self, value: object) -> None:
        assert not is_valid_grade(value)

    def test_custom_range(self) -> None:
        assert is_valid_grade(5, lower=1, upper=10)
        assert not is_valid_grade(0, lower=1, upper=10)


class TestIsManualOverride(object):
    def test_no_auto_grade_is_always_override(self) -> None:
        assert is_manual_override(90, None)

    def test_within_tolerance(self) -> None:
        assert not is_manual_override(88.5, 88.5)
        assert not is_manual_override(88.505, 88.5)

    def test_beyond_tolerance(self) -> None:
        assert is_manual_override(90, 88.5)
        assert is_manual_override(88.52, 88.5)

    def test_custom_tolerance(self) -> None:
        assert not is_manual_override(90, 88.5, tolerance=2)


class TestCloseRecord(object):
    def test_builds_closed_record(self) -> None:
        actor = UserID()
        aggregate = GradeAggregate(auto_grade=88.5, pending_ungraded_count=1, graded_count=3, total_evaluable=4)

        params = close_record(
            enrollment_id=EnrollmentID(),
            cohort_id=CohortID(),
            course_id=CourseID(),
            student_id=UserID(),
            aggregate=aggregate,
            final_grade=90,
            actor_id=actor,
            now=NOW,
        )

        assert params["status"] is ClosureStatus.Closed
        assert params["final_grade"] == 90.0
        assert isinstance(params["final_grade"], float)
        assert params["auto_grade"] == 88.5
        assert params["manual_override"] is True
        assert params["pending_ungraded_count"] == 1
        assert params["closed_at"] == NOW
        assert params["closed_by"] == actor
        assert "reopened_at" not in params

    def test_require_open_rejects_closed(self) -> None:
        current = closure(ClosureStatus.Closed, final_grade=70.0)

        with pytest.raises(NotOpen):
            close_record(
                enrollment_id=current.enrollment_id,
                cohort_id=current.cohort_id,
                course_id=current.course_id,
                student_id=current.student_id,
                aggregate=GradeAggregate(),
                final_grade=75,
                actor_id=UserID(),
                now=NOW,
                current=current,
                require_open=True,
            )

    def test_closing_closed_record_without_require_open(self) -> None:
        current = closure(ClosureStatus.Closed, final_grade=70.0)

        params = close_record(
            enrollment_id=current.enrollment_id,
            cohort_id=current.cohort_id,
            course_id=current.course_id,
            student_id=current.student_id,
            aggregate=GradeAggregate(auto_grade=70.0),
            final_grade=70,
            actor_id=UserID(),
            now=NOW,
            current=current,
        )

        assert params["manual_override"] is False


class TestReopenRecord(object):
    def test_missing_record_is_not_closed(self) -> None:
        with pytest.raises(NotClosed):
            reopen_record(
                current=None,
                student_id=UserID(),
                course_id=CourseID(),
                aggregate=GradeAggregate(),
                actor_id=UserID(),
                now=NOW,
            )

    def test_open_record_is_not_closed(self) -> None:
        current = closure(ClosureStatus.Open)

        with pytest.raises(NotClosed):
            reopen_record(
                current=current,
                student_id=current.student_id,
                course_id=current.course_id,
                aggregate=GradeAggregate(),
                actor_id=UserID(),
                now=NOW,
            )

    def test_keeps_history(self) -> None:
        actor = UserID()
        current = closure(ClosureStatus.Closed, final_grade=90.0, auto_grade=88.5, manual_override=True)
        aggregate = GradeAggregate(auto_grade=89.0, pending_ungraded_count=0, graded_count=4, total_evaluable=4)

        params = reopen_record(
            current=current,
            student_id=current.student_id,
            course_id=current.course_id,
            aggregate=aggregate,
            actor_id=actor,
            now=LATER,
        )

        assert params["status"] is ClosureStatus.Open
        assert params["reopened_at"] == LATER
        assert params["reopened_by"] == actor
        assert params["pending_ungraded_count"] == 0
        for kept in ("final_grade", "auto_grade", "manual_override", "closed_at", "closed_by"):
            assert kept not in params
