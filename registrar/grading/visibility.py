from __future__ import annotations

import typing as t

from registrar.model import Cohort, CourseID, User

from .authz import is_authorized, is_mentor


def visible_courses(cohort: Cohort, actor: User, allowed: t.AbstractSet[CourseID] | None) -> frozenset[CourseID]:
    """The attached courses of ``cohort`` that ``actor`` may see.

    ``allowed`` is the actor's mentor allow-list for the cohort, or None when
    they have no entry. Allow-list ids no longer attached to the cohort are
    ignored, so detaching a course hides it from every mentor at once.

    The unrestricted default for a missing entry applies only to delegated
    mentors of the cohort; any other actor who is not authorized sees nothing.
    """
    attached = frozenset(cohort.course_ids)
    if is_authorized(actor, cohort):
        return attached
    if is_mentor(actor, cohort):
        return attached if allowed is None else attached & frozenset(allowed)
    return frozenset()
