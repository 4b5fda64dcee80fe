from __future__ import annotations

import sqlalchemy as sqla

from registrar.core import di
from registrar.model import Activity, ActivityID, ActivityKind, Course, CourseID, EvaluableActivity

from . import Session
from .table import activities, courses

EvaluableKinds = tuple(k.value for k in ActivityKind if k.evaluable)


def get_course(course_id: CourseID, session: Session = di.Provide["storage.persistent.session"]) -> Course | None:
    stmt = sqla.select(courses.__table__).where(courses.course_id == course_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Course(**row) if row else None


def create_course(*, title: str, session: Session = di.Provide["storage.persistent.session"]) -> Course:
    course = courses(course_id=CourseID(), title=title)
    session.add(course)
    session.flush()
    return get_course(course.course_id, session=session)  # type: ignore[return-value]


def get(key: ActivityID, session: Session = di.Provide["storage.persistent.session"]) -> Activity | None:
    stmt = sqla.select(activities.__table__).where(activities.activity_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Activity(**row) if row else None


def find(
    course_id: CourseID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Activity, ...]:
    """All activities of a course in lesson order, then activity order."""
    stmt = (
        sqla.select(activities.__table__)
        .where(activities.course_id == course_id)
        .order_by(activities.lesson_position, activities.position, activities.activity_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(Activity(**row) for row in rows)


def find_evaluable(
    course_id: CourseID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[EvaluableActivity, ...]:
    """Activities that count toward the course grade (quizzes and graded assignments).

    Ordering is stable across calls: lesson position, activity position, then id.
    """
    stmt = (
        sqla.select(activities.course_id, activities.activity_id, activities.kind)
        .where(activities.course_id == course_id, activities.kind.in_(EvaluableKinds))
        .order_by(activities.lesson_position, activities.position, activities.activity_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(EvaluableActivity(**row) for row in rows)


def create(
    *,
    course_id: CourseID,
    kind: ActivityKind,
    title: str,
    lesson_position: int = 0,
    position: int = 0,
    session: Session = di.Provide["storage.persistent.session"],
) -> Activity:
    activity = activities(
        activity_id=ActivityID(),
        course_id=course_id,
        kind=kind.value,
        title=title,
        lesson_position=lesson_position,
        position=position,
    )
    session.add(activity)
    session.flush()
    return get(activity.activity_id, session=session)  # type: ignore[return-value]
