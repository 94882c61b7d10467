"""
services/group_service.py — Group business logic.

Ownership rule:
  Every query carries `Group.created_by == caller_id`. A group that does not
  exist and a group owned by someone else are indistinguishable to the
  caller: both raise GROUP_NOT_FOUND (404).

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility; only flush here.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.errors import GROUP_NOT_FOUND_MESSAGE, AppError, ErrorCode
from backend.app.models.group import Group


# ── Private helpers ────────────────────────────────────────────────────────

def _get_owned_group_or_404(group_id: int, caller_id: int, session: Session) -> Group:
    """Returns the caller's Group or raises GROUP_NOT_FOUND (404)."""
    group = session.execute(
        select(Group).where(
            Group.id == group_id,
            Group.created_by == caller_id,
        )
    ).scalar_one_or_none()

    if group is None:
        raise AppError(
            ErrorCode.GROUP_NOT_FOUND,
            GROUP_NOT_FOUND_MESSAGE,
            404,
        )
    return group


# ── Public service functions ───────────────────────────────────────────────

def list_groups(caller_id: int, session: Session) -> list[Group]:
    """Returns the caller's groups, newest first."""
    stmt = (
        select(Group)
        .where(Group.created_by == caller_id)
        .order_by(Group.created_at.desc(), Group.id.desc())
    )
    return list(session.execute(stmt).scalars().all())


def get_group(group_id: int, caller_id: int, session: Session) -> Group:
    """Returns one of the caller's groups or raises GROUP_NOT_FOUND (404)."""
    return _get_owned_group_or_404(group_id, caller_id, session)


def create_group(name: str, caller_id: int, session: Session) -> Group:
    """
    Creates a group owned by the caller.

    Args:
        name:      Group name (validated by schema — non-empty, max 100 chars).
        caller_id: The authenticated user, passed by the route as a plain int.
    """
    group = Group(name=name, created_by=caller_id)
    session.add(group)
    session.flush()  # populate group.id
    return group


def update_group(group_id: int, name: str, caller_id: int, session: Session) -> Group:
    """
    Renames one of the caller's groups.

    Raises:
      AppError(GROUP_NOT_FOUND, 404) — absent or owned by someone else
    """
    group = _get_owned_group_or_404(group_id, caller_id, session)
    group.name = name
    session.flush()
    return group


def delete_group(group_id: int, caller_id: int, session: Session) -> None:
    """
    Deletes one of the caller's groups together with all of its expenses.

    The expenses go through the ORM cascade on Group.expenses (and the
    ON DELETE CASCADE foreign key where the database enforces it).

    Raises:
      AppError(GROUP_NOT_FOUND, 404) — absent or owned by someone else;
                                       nothing is deleted
    """
    group = _get_owned_group_or_404(group_id, caller_id, session)
    session.delete(group)
    session.flush()
