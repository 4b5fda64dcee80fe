from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from registrar.core import di
from registrar.model import CohortID, CourseID, MentorAccess, UserID

from . import Session
from .table import mentor_access


def get(
    cohort_id: CohortID,
    mentor_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> MentorAccess | None:
    stmt = sqla.select(mentor_access.__table__).where(
        mentor_access.cohort_id == cohort_id,
        mentor_access.mentor_id == mentor_id,
    )
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return MentorAccess(cohort_id=row["cohort_id"], mentor_id=row["mentor_id"], course_ids=frozenset(row["course_ids"]))


def get_allowed_courses(
    cohort_id: CohortID,
    mentor_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> frozenset[CourseID] | None:
    """The stored allow-list, or None when the mentor has no entry (unrestricted)."""
    access = get(cohort_id, mentor_id, session=session)
    return access.course_ids if access is not None else None


def find(
    cohort_id: CohortID,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[MentorAccess, ...]:
    stmt = (
        sqla.select(mentor_access.__table__)
        .where(mentor_access.cohort_id == cohort_id)
        .order_by(mentor_access.mentor_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(
        MentorAccess(cohort_id=row["cohort_id"], mentor_id=row["mentor_id"], course_ids=frozenset(row["course_ids"]))
        for row in rows
    )


def set_allowed_courses(
    cohort_id: CohortID,
    mentor_id: UserID,
    course_ids: t.Iterable[CourseID],
    session: Session = di.Provide["storage.persistent.session"],
) -> MentorAccess:
    """Replace the mentor's allow-list. An empty iterable hides every course."""
    allowed = sorted(set(course_ids))
    stmt = sqla.select(mentor_access).where(
        mentor_access.cohort_id == cohort_id,
        mentor_access.mentor_id == mentor_id,
    )
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is None:
        session.add(mentor_access(cohort_id=cohort_id, mentor_id=mentor_id, course_ids=allowed))
    else:
        existing.course_ids = allowed
    session.flush()
    return get(cohort_id, mentor_id, session=session)  # type: ignore[return-value]


def clear(
    cohort_id: CohortID,
    mentor_id: UserID,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Remove the mentor's entry, restoring unrestricted access. Returns whether one existed."""
    stmt = sqla.delete(mentor_access).where(
        mentor_access.cohort_id == cohort_id,
        mentor_access.mentor_id == mentor_id,
    )
    result = session.execute(stmt)
    session.flush()
    return result.rowcount > 0  # pyright: ignore[reportAttributeAccessIssue]
