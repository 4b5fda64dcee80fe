from registrar.model import Cohort, User, UserRole


def is_authorized(actor: User, cohort: Cohort) -> bool:
    """Whether ``actor`` may close, reopen and delegate for ``cohort``: its teacher, or any admin teacher."""
    return actor.role is UserRole.AdminTeacher or actor.user_id == cohort.teacher_id


def is_mentor(actor: User, cohort: Cohort) -> bool:
    return actor.user_id in cohort.mentor_ids
