from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from registrar.core import di
from registrar.lib import NotSet
from registrar.model import Cohort, CohortID, CourseID, User, UserID

from . import Session
from .table import cohort_courses, cohort_mentors, cohort_students, cohorts, mentor_access, users


def get(cohort_id: CohortID, session: Session = di.Provide["storage.persistent.session"]) -> Cohort | None:
    """Get a cohort along with its attached courses and delegated mentors."""
    stmt = sqla.select(cohorts.__table__).where(cohorts.cohort_id == cohort_id)
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None

    course_stmt = (
        sqla.select(cohort_courses.course_id)
        .where(cohort_courses.cohort_id == cohort_id)
        .order_by(cohort_courses.position, cohort_courses.course_id)
    )
    mentor_stmt = (
        sqla.select(cohort_mentors.mentor_id)
        .where(cohort_mentors.cohort_id == cohort_id)
        .order_by(cohort_mentors.mentor_id)
    )
    course_ids = tuple(session.execute(course_stmt).scalars().all())
    mentor_ids = tuple(session.execute(mentor_stmt).scalars().all())
    return Cohort(**row, course_ids=course_ids, mentor_ids=mentor_ids)


def find_students(
    cohort_id: CohortID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    """The cohort roster, ordered by student name."""
    stmt = (
        sqla.select(users.__table__)
        .join(cohort_students, users.user_id == cohort_students.student_id)
        .where(cohort_students.cohort_id == cohort_id)
        .order_by(users.name, users.user_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def has_student(
    cohort_id: CohortID,
    student_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    stmt = sqla.select(cohort_students.student_id).where(
        cohort_students.cohort_id == cohort_id,
        cohort_students.student_id == student_id,
    )
    return session.execute(stmt).scalar_one_or_none() is not None


def create(
    *,
    name: str,
    teacher_id: UserID,
    course_ids: t.Sequence[CourseID] = (),
    session: Session = di.Provide["storage.persistent.session"],
) -> Cohort:
    cohort = cohorts(cohort_id=CohortID(), name=name, teacher_id=teacher_id)
    session.add(cohort)
    session.flush()
    for position, course_id in enumerate(course_ids):
        session.add(cohort_courses(cohort_id=cohort.cohort_id, course_id=course_id, position=position))
    session.flush()
    return get(cohort.cohort_id, session=session)  # type: ignore[return-value]


def update(
    cohort_id: CohortID,
    *,
    name: str | NotSet = NotSet(),
    attach_courses: t.Sequence[CourseID] | None = None,
    detach_courses: t.Collection[CourseID] | None = None,
    add_mentors: t.Collection[UserID] | None = None,
    remove_mentors: t.Collection[UserID] | None = None,
    add_students: t.Collection[UserID] | None = None,
    remove_students: t.Collection[UserID] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Cohort:
    """Update a cohort and its course, mentor and roster links.

    Detaching a course leaves mentor allow-lists that name it untouched;
    visibility is always intersected with the attached set at read time.
    Removing a mentor drops their allow-list for the cohort.

    Raises:
        KeyError: If cohort_id does not correspond to a cohort
    """
    current = get(cohort_id, session=session)
    if current is None:
        raise KeyError(f"Cohort {cohort_id} not found")

    if not isinstance(name, NotSet):
        session.execute(sqla.update(cohorts).where(cohorts.cohort_id == cohort_id).values(name=name))

    if attach_courses:
        position = len(current.course_ids)
        for course_id in attach_courses:
            if course_id in current.course_ids:
                continue
            session.add(cohort_courses(cohort_id=cohort_id, course_id=course_id, position=position))
            position += 1

    if detach_courses:
        session.execute(
            sqla.delete(cohort_courses).where(
                cohort_courses.cohort_id == cohort_id,
                cohort_courses.course_id.in_(list(detach_courses)),
            )
        )

    if add_mentors:
        for mentor_id in set(add_mentors) - set(current.mentor_ids):
            session.add(cohort_mentors(cohort_id=cohort_id, mentor_id=mentor_id))

    if remove_mentors:
        session.execute(
            sqla.delete(cohort_mentors).where(
                cohort_mentors.cohort_id == cohort_id,
                cohort_mentors.mentor_id.in_(list(remove_mentors)),
            )
        )
        session.execute(
            sqla.delete(mentor_access).where(
                mentor_access.cohort_id == cohort_id,
                mentor_access.mentor_id.in_(list(remove_mentors)),
            )
        )

    if add_students:
        enrolled = {s.user_id for s in find_students(cohort_id, session=session)}
        for student_id in set(add_students) - enrolled:
            session.add(cohort_students(cohort_id=cohort_id, student_id=student_id))

    if remove_students:
        session.execute(
            sqla.delete(cohort_students).where(
                cohort_students.cohort_id == cohort_id,
                cohort_students.student_id.in_(list(remove_students)),
            )
        )

    session.flush()
    return get(cohort_id, session=session)  # type: ignore[return-value]
