"""Tests for course visibility and mentor delegation."""

from __future__ import annotations

import itertools
import typing as t

import pytest
from sqlalchemy.orm import Session

from registrar.grading import GradingService, is_authorized, NotFound, Unauthorized, visible_courses
from registrar.model import Cohort, CohortID, Course, CourseID, User, UserID, UserRole
from registrar.storage import cohort as cohort_storage

from ..conftest import Classroom, NOW

counter = itertools.count()


def user(role: UserRole = UserRole.Teacher) -> User:
    n = next(counter)
    return User(
        user_id=UserID(),
        email=f"user{n}@example.com",
        name=f"User {n}",
        role=role,
        create_time=NOW,
        update_time=NOW,
    )


@pytest.fixture
def courses() -> tuple[CourseID, CourseID, CourseID]:
    return CourseID(), CourseID(), CourseID()


@pytest.fixture
def people() -> dict[str, User]:
    return {"teacher": user(), "admin": user(UserRole.AdminTeacher), "mentor": user(), "outsider": user()}


@pytest.fixture
def cohort(courses: tuple[CourseID, ...], people: dict[str, User]) -> Cohort:
    return Cohort(
        cohort_id=CohortID(),
        name="Spring",
        teacher_id=people["teacher"].user_id,
        course_ids=courses,
        mentor_ids=(people["mentor"].user_id,),
        create_time=NOW,
        update_time=NOW,
    )


class TestIsAuthorized(object):
    def test_roles(self, cohort: Cohort, people: dict[str, User]) -> None:
        assert is_authorized(people["teacher"], cohort)
        assert is_authorized(people["admin"], cohort)
        assert not is_authorized(people["mentor"], cohort)
        assert not is_authorized(people["outsider"], cohort)


class TestVisibleCourses(object):
    def test_owner_and_admin_see_all(self, cohort: Cohort, people: dict[str, User], courses: tuple) -> None:
        assert visible_courses(cohort, people["teacher"], None) == frozenset(courses)
        assert visible_courses(cohort, people["admin"], frozenset()) == frozenset(courses)

    def test_mentor_without_entry_sees_all(self, cohort: Cohort, people: dict[str, User], courses: tuple) -> None:
        assert visible_courses(cohort, people["mentor"], None) == frozenset(courses)

    def test_mentor_with_empty_entry_sees_none(self, cohort: Cohort, people: dict[str, User]) -> None:
        assert visible_courses(cohort, people["mentor"], frozenset()) == frozenset()

    def test_mentor_restricted(self, cohort: Cohort, people: dict[str, User], courses: tuple) -> None:
        a, _, _ = courses
        assert visible_courses(cohort, people["mentor"], {a}) == {a}

    def test_detached_course_disappears(self, cohort: Cohort, people: dict[str, User], courses: tuple) -> None:
        a, b, c = courses
        detached = cohort.model_copy(update={"course_ids": (b, c)})

        assert visible_courses(detached, people["mentor"], {a}) == frozenset()

    def test_allow_list_cannot_add_courses(self, cohort: Cohort, people: dict[str, User], courses: tuple) -> None:
        a, _, _ = courses
        assert visible_courses(cohort, people["mentor"], {a, CourseID()}) == {a}

    def test_outsider_sees_nothing(self, cohort: Cohort, people: dict[str, User]) -> None:
        assert visible_courses(cohort, people["outsider"], None) == frozenset()

    def test_subset_of_attached(self, cohort: Cohort, people: dict[str, User]) -> None:
        for actor in people.values():
            for allowed in (None, frozenset(), frozenset(cohort.course_ids[:1])):
                assert visible_courses(cohort, actor, allowed) <= frozenset(cohort.course_ids)


class TestMentorAccess(object):
    def test_restrict_and_clear(self, service: GradingService, classroom: Classroom) -> None:
        cohort_id = classroom.cohort.cohort_id
        everything = {classroom.course.course_id, classroom.other_course.course_id}

        assert service.visible_courses(cohort_id, classroom.mentor) == everything

        access = service.set_mentor_access(
            cohort_id, classroom.mentor.user_id, [classroom.course.course_id], classroom.teacher
        )

        assert access.course_ids == {classroom.course.course_id}
        assert service.visible_courses(cohort_id, classroom.mentor) == {classroom.course.course_id}
        assert service.visible_courses(cohort_id, classroom.teacher) == everything

        assert service.clear_mentor_access(cohort_id, classroom.mentor.user_id, classroom.admin)
        assert service.visible_courses(cohort_id, classroom.mentor) == everything
        assert not service.clear_mentor_access(cohort_id, classroom.mentor.user_id, classroom.admin)

    def test_empty_restriction_hides_everything(self, service: GradingService, classroom: Classroom) -> None:
        service.set_mentor_access(classroom.cohort.cohort_id, classroom.mentor.user_id, [], classroom.teacher)

        assert service.visible_courses(classroom.cohort.cohort_id, classroom.mentor) == frozenset()

    def test_detaching_course_hides_it(
        self, service: GradingService, classroom: Classroom, db_session: Session
    ) -> None:
        cohort_id = classroom.cohort.cohort_id
        service.set_mentor_access(cohort_id, classroom.mentor.user_id, [classroom.course.course_id], classroom.teacher)

        with db_session.begin():
            cohort_storage.update(cohort_id, detach_courses=[classroom.course.course_id], session=db_session)

        assert service.visible_courses(cohort_id, classroom.mentor) == frozenset()
        assert service.visible_courses(cohort_id, classroom.teacher) == {classroom.other_course.course_id}

    def test_outsider_sees_nothing(self, service: GradingService, classroom: Classroom) -> None:
        assert service.visible_courses(classroom.cohort.cohort_id, classroom.outsider) == frozenset()

    @pytest.mark.parametrize("who", ["mentor", "outsider"])
    def test_only_owner_or_admin_may_delegate(self, who: str, service: GradingService, classroom: Classroom) -> None:
        with pytest.raises(Unauthorized):
            service.set_mentor_access(
                classroom.cohort.cohort_id, classroom.mentor.user_id, [], getattr(classroom, who)
            )
        with pytest.raises(Unauthorized):
            service.clear_mentor_access(classroom.cohort.cohort_id, classroom.mentor.user_id, getattr(classroom, who))

    def test_target_must_be_mentor(self, service: GradingService, classroom: Classroom) -> None:
        with pytest.raises(NotFound):
            service.set_mentor_access(
                classroom.cohort.cohort_id, classroom.outsider.user_id, [], classroom.teacher
            )

    def test_courses_must_be_attached(
        self, service: GradingService, classroom: Classroom, course_factory: t.Callable[..., Course]
    ) -> None:
        stray = course_factory("Chemistry")

        with pytest.raises(NotFound):
            service.set_mentor_access(
                classroom.cohort.cohort_id, classroom.mentor.user_id, [stray.course_id], classroom.teacher
            )

    def test_restricted_mentor_cannot_read_hidden_course(self, service: GradingService, classroom: Classroom) -> None:
        cohort_id = classroom.cohort.cohort_id
        service.set_mentor_access(cohort_id, classroom.mentor.user_id, [classroom.course.course_id], classroom.teacher)

        service.grade_sheet(cohort_id, classroom.course.course_id, classroom.mentor)
        with pytest.raises(Unauthorized):
            service.grade_sheet(cohort_id, classroom.other_course.course_id, classroom.mentor)
