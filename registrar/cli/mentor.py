"""CLI commands for restricting which courses a delegated mentor may grade."""

from __future__ import annotations

import registrar.lib.cli as click
from registrar.core import di
from registrar.grading import GradingService
from registrar.model import CohortID, CourseID, UserID
from registrar.storage import cohort as cohort_storage
from registrar.storage import mentor as mentor_storage

from .grades import as_option, resolve_actor


@click.group("mentor")
def mentor():
    """Show and change mentor course restrictions."""
    ...


@mentor.command("show")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@as_option
@di.inject
def mentor_show(
    cohort_id: CohortID,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """List the cohort's mentors and the courses each can see."""
    actor = resolve_actor(service, actor_ref)
    with service.transaction() as session:
        cohort = cohort_storage.get(cohort_id, session=session)
        if cohort is None:
            click.echo(f"Error: Cohort '{cohort_id}' not found.", err=True)
            raise SystemExit(1)
        restrictions = {a.mentor_id: a for a in mentor_storage.find(cohort_id, session=session)}

    click.echo(f"Cohort: {cohort.name}")
    click.echo(f"  Courses: {', '.join(cohort.course_ids) or '(none)'}")
    click.echo(f"  Visible to you: {len(service.visible_courses(cohort_id, actor))}")
    if not cohort.mentor_ids:
        click.echo("\nNo mentors.")
        return

    click.echo(f"\nMentors ({len(cohort.mentor_ids)}):")
    for mentor_id in cohort.mentor_ids:
        access = restrictions.get(mentor_id)
        if access is None:
            click.echo(f"  - {mentor_id}: all courses")
            continue
        visible = sorted(access.course_ids & frozenset(cohort.course_ids))
        click.echo(f"  - {mentor_id}: {', '.join(visible) or 'no courses'}")


@mentor.command("grant")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("mentor_id", type=click.KeyParamType(UserID))
@click.argument("course_ids", nargs=-1, type=click.KeyParamType(CourseID))
@as_option
@di.inject
def mentor_grant(
    cohort_id: CohortID,
    mentor_id: UserID,
    course_ids: tuple[CourseID, ...],
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Restrict MENTOR_ID to COURSE_IDS. With no courses the mentor sees nothing."""
    actor = resolve_actor(service, actor_ref)
    access = service.set_mentor_access(cohort_id, mentor_id, course_ids, actor)
    click.echo(f"Mentor {mentor_id} restricted to {len(access.course_ids)} course(s)")


@mentor.command("revoke")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("mentor_id", type=click.KeyParamType(UserID))
@as_option
@di.inject
def mentor_revoke(
    cohort_id: CohortID,
    mentor_id: UserID,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Remove MENTOR_ID's restriction so they see every attached course."""
    actor = resolve_actor(service, actor_ref)
    if service.clear_mentor_access(cohort_id, mentor_id, actor):
        click.echo(f"Mentor {mentor_id} now sees all courses")
    else:
        click.echo(f"Mentor {mentor_id} had no restriction")
