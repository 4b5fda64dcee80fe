"""Automatic course grade from the latest submission per evaluable activity."""

from __future__ import annotations

import datetime
import typing as t

from registrar.model import ActivityID, CourseID, EvaluableActivity, Submission, ValueModel


class GradeAggregate(ValueModel):
    auto_grade: float | None = None
    pending_ungraded_count: int = 0
    graded_count: int = 0
    total_evaluable: int = 0


def _rank(submission: Submission) -> tuple[bool, datetime.datetime | None]:
    # untimestamped submissions rank below any timestamped one
    return submission.submitted_at is not None, submission.submitted_at


def latest_submissions(
    activities: t.Sequence[EvaluableActivity], submissions: t.Iterable[Submission]
) -> dict[tuple[CourseID, ActivityID], Submission]:
    """The latest submission for each evaluable activity that has any.

    The latest is the one with the greatest ``submitted_at``; on a tie, or
    when neither has a timestamp, the one encountered later wins.
    """
    wanted = {a.identity for a in activities}
    latest: dict[tuple[CourseID, ActivityID], Submission] = {}
    for submission in submissions:
        identity = submission.course_id, submission.activity_id
        if identity not in wanted:
            continue
        current = latest.get(identity)
        if current is None:
            latest[identity] = submission
            continue
        has_ts, ts = _rank(submission)
        cur_has_ts, cur_ts = _rank(current)
        if has_ts != cur_has_ts:
            if has_ts:
                latest[identity] = submission
        elif not has_ts or ts >= cur_ts:  # type: ignore[operator]
            latest[identity] = submission
    return latest


def compute_aggregate(
    activities: t.Sequence[EvaluableActivity], submissions: t.Iterable[Submission]
) -> GradeAggregate:
    """Compute the automatic grade of one student in one course.

    Only submissions naming one of ``activities`` take part. An activity
    counts as graded when its latest submission has a numeric grade or an
    explicit graded status; only numeric grades enter the mean.

    Args:
        activities: The course's evaluable activities
        submissions: The student's submissions, in any order

    Returns:
        The aggregate; ``auto_grade`` is None when no latest submission
        carries a numeric grade
    """
    total = len({a.identity for a in activities})
    latest = latest_submissions(activities, submissions)

    graded = [s for s in latest.values() if s.is_graded]
    numeric = [s.grade for s in graded if s.grade is not None]

    return GradeAggregate(
        auto_grade=(sum(numeric) / len(numeric)) if numeric else None,
        pending_ungraded_count=max(total - len(graded), 0),
        graded_count=len(graded),
        total_evaluable=total,
    )
