"""CLI commands for reviewing and closing course grades."""

from __future__ import annotations

import signal
import threading

import registrar.lib.cli as click
from registrar.core import di
from registrar.grading import GradeSheet, GradingService, NotFound
from registrar.model import CohortID, CourseID, User, UserID
from registrar.storage import user as user_storage

as_option = click.option(
    "--as",
    "actor_ref",
    required=True,
    metavar="EMAIL|USER_ID",
    help="Operator to act as; authorization is checked against this user",
)


def resolve_actor(service: GradingService, actor_ref: str) -> User:
    with service.transaction() as session:
        if "@" in actor_ref:
            actor = user_storage.get(email=actor_ref, session=session)
        else:
            actor = user_storage.get(UserID(actor_ref), session=session)
    if actor is None:
        raise NotFound(f"user {actor_ref} not found")
    return actor


def fmt_grade(grade: float | None) -> str:
    return f"{grade:.1f}" if grade is not None else "-"


def print_sheet(sheet: GradeSheet) -> None:
    click.echo(f"Course {sheet.course_id} in {sheet.cohort_id}: {len(sheet.rows)} student(s), {sheet.open_count} open")
    for row in sheet.rows:
        agg = row.aggregate
        final = row.closure.final_grade if row.closure is not None else None
        flag = " override" if row.closure is not None and row.closure.manual_override else ""
        click.echo(
            f"  {row.student.name:<30} {row.status.value:<7}"
            f" auto={fmt_grade(agg.auto_grade):>5} final={fmt_grade(final):>5}"
            f" graded={agg.graded_count}/{agg.total_evaluable} pending={agg.pending_ungraded_count}{flag}"
        )
        click.echo(f"    {row.student.user_id}")


@click.group("grades")
def grades():
    """Review, close and reopen course grades."""
    ...


@grades.command("sheet")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("course_id", type=click.KeyParamType(CourseID))
@as_option
@di.inject
def grades_sheet(
    cohort_id: CohortID,
    course_id: CourseID,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Show the grade sheet of a course for every student in a cohort."""
    actor = resolve_actor(service, actor_ref)
    print_sheet(service.grade_sheet(cohort_id, course_id, actor))


@grades.command("close")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("course_id", type=click.KeyParamType(CourseID))
@click.argument("student_id", type=click.KeyParamType(UserID))
@click.argument("final_grade", type=float)
@click.option("--yes", "-y", is_flag=True, default=False, help="Close even if activities are still ungraded")
@as_option
@di.inject
def grades_close(
    cohort_id: CohortID,
    course_id: CourseID,
    student_id: UserID,
    final_grade: float,
    yes: bool,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Close a course for one student with FINAL_GRADE."""
    actor = resolve_actor(service, actor_ref)
    if not yes:
        sheet = service.grade_sheet(cohort_id, course_id, actor)
        row = next((r for r in sheet.rows if r.student.user_id == student_id), None)
        if row is not None and row.aggregate.pending_ungraded_count > 0:
            click.confirm(
                f"{row.student.name} has {row.aggregate.pending_ungraded_count} ungraded activities. Close anyway?",
                abort=True,
            )

    record = service.close(cohort_id, course_id, student_id, final_grade, actor)
    click.echo(f"Closed {course_id} for {student_id}")
    click.echo(f"  Final grade: {fmt_grade(record.final_grade)} (auto {fmt_grade(record.auto_grade)})")
    if record.manual_override:
        click.echo("  Manual override")
    if record.pending_ungraded_count:
        click.echo(f"  Ungraded activities: {record.pending_ungraded_count}")


@grades.command("reopen")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("course_id", type=click.KeyParamType(CourseID))
@click.argument("student_id", type=click.KeyParamType(UserID))
@as_option
@di.inject
def grades_reopen(
    cohort_id: CohortID,
    course_id: CourseID,
    student_id: UserID,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Reopen a closed course for one student."""
    actor = resolve_actor(service, actor_ref)
    record = service.reopen(cohort_id, course_id, student_id, actor)
    click.echo(f"Reopened {course_id} for {student_id}")
    click.echo(f"  Previous final grade: {fmt_grade(record.final_grade)}")
    click.echo(f"  Ungraded activities: {record.pending_ungraded_count}")


@grades.command("close-all")
@click.argument("cohort_id", type=click.KeyParamType(CohortID))
@click.argument("course_id", type=click.KeyParamType(CourseID))
@click.argument("grades_", metavar="[STUDENT_ID=GRADE]...", nargs=-1, type=click.AssignmentParamType(UserID))
@click.option(
    "--use-suggested",
    is_flag=True,
    default=False,
    help="Students without an explicit grade get their suggested grade (final if set, else automatic)",
)
@click.option("--acknowledge-pending", is_flag=True, default=False, help="Close students with ungraded activities")
@as_option
@di.inject
def grades_close_all(
    cohort_id: CohortID,
    course_id: CourseID,
    grades_: tuple[tuple[UserID, float], ...],
    use_suggested: bool,
    acknowledge_pending: bool,
    actor_ref: str,
    service: GradingService = di.Provide["grading"],
) -> None:
    """Close a course for every student in the cohort whose record is open."""
    actor = resolve_actor(service, actor_ref)
    final_grades: dict[UserID, float] = {}
    if use_suggested:
        sheet = service.grade_sheet(cohort_id, course_id, actor)
        for row in sheet.rows:
            if row.suggested_grade is not None:
                final_grades[row.student.user_id] = round(row.suggested_grade, 1)
    final_grades.update(dict(grades_))

    # Ctrl-C lets the group in flight finish, then stops
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    try:
        result = service.close_all(
            cohort_id,
            course_id,
            final_grades,
            actor,
            acknowledge_pending=acknowledge_pending,
            cancel=cancel,
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    click.echo(f"Closed {result.closed_count} record(s) in {len(result.succeeded_groups)} group(s)")
    for failure in result.failed_groups:
        click.echo(f"  Group {failure.index} failed ({len(failure.student_ids)} students): {failure.error}", err=True)
    for skipped in result.skipped_groups:
        click.echo(f"  Group {skipped.index} skipped ({len(skipped.student_ids)} students)", err=True)
    if result.retry_student_ids:
        click.echo("Retry with:", err=True)
        for sid in result.retry_student_ids:
            click.echo(f"  {sid}", err=True)
    result.raise_for_failures()
