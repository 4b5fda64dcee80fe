from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from registrar.core import di
from registrar.model import User, UserID, UserRole

from . import Session
from .table import users


@t.overload
def get(
    user_id: UserID,
    *,
    session: Session = ...,
) -> User | None: ...


@t.overload
def get(
    user_id: None = ...,
    *,
    email: str,
    session: Session = ...,
) -> User | None: ...


def get(
    user_id: UserID | None = None,
    *,
    email: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        stmt = sqla.select(users.__table__).where(users.email == email)

    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row else None


def find(
    *,
    user_ids: t.Collection[UserID] | None = None,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    """Find users matching criteria, ordered by name."""
    stmt = sqla.select(users.__table__).order_by(users.name, users.user_id)
    if user_ids is not None:
        stmt = stmt.where(users.user_id.in_(list(user_ids)))
    if role is not None:
        stmt = stmt.where(users.role == role.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def create(
    *,
    email: str,
    name: str,
    role: UserRole = UserRole.Student,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    user = users(
        user_id=UserID(),
        email=email,
        name=name,
        role=role.value,
    )
    session.add(user)
    session.flush()
    return get(user.user_id, session=session)  # type: ignore[return-value]
