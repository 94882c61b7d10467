"""
services/expense_service.py — Expense business logic.

Authorization rules:
  - List / Create: caller must own the group (Group.created_by == caller_id).
  - Update / Delete: caller must have created the expense
    (Expense.created_by == caller_id).

In every case a missing row and a row belonging to another user produce the
same 404, so one tenant can never learn whether another tenant's id exists.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives plain ints and Decimals; returns ORM objects or raises AppError.
  - Commits are the route's responsibility; only flush here.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.errors import (
    EXPENSE_NOT_FOUND_MESSAGE,
    GROUP_NOT_FOUND_MESSAGE,
    AppError,
    ErrorCode,
)
from backend.app.models.expense import Expense
from backend.app.models.group import Group

_CENT = Decimal("0.01")


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


def _get_owned_expense_or_404(expense_id: int, caller_id: int, session: Session) -> Expense:
    """Returns the caller's Expense or raises EXPENSE_NOT_FOUND (404)."""
    expense = session.execute(
        select(Expense).where(
            Expense.id == expense_id,
            Expense.created_by == caller_id,
        )
    ).scalar_one_or_none()

    if expense is None:
        raise AppError(
            ErrorCode.EXPENSE_NOT_FOUND,
            EXPENSE_NOT_FOUND_MESSAGE,
            404,
        )
    return expense


def total_amount(expenses: list[Expense]) -> Decimal:
    """Sum of expense amounts, quantized to cents. Decimal arithmetic only."""
    return sum((Decimal(e.amount) for e in expenses), Decimal("0")).quantize(_CENT)


# ── Public service functions ───────────────────────────────────────────────

def list_expenses(group_id: int, caller_id: int, session: Session) -> list[Expense]:
    """
    Returns the expenses of one of the caller's groups, newest first.

    Raises:
      AppError(GROUP_NOT_FOUND, 404) — group absent or owned by someone else
    """
    _get_owned_group_or_404(group_id, caller_id, session)

    stmt = (
        select(Expense)
        .where(Expense.group_id == group_id)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
    )
    return list(session.execute(stmt).scalars().all())


def create_expense(
        group_id: int,
        description: str,
        amount: Decimal,
        caller_id: int,
        session: Session,
) -> Expense:
    """
    Records an expense under one of the caller's groups.

    description and amount are already validated by ExpenseInputSchema.

    Raises:
      AppError(GROUP_NOT_FOUND, 404) — group absent or owned by someone else
    """
    _get_owned_group_or_404(group_id, caller_id, session)

    expense = Expense(
        description=description,
        amount=amount,
        group_id=group_id,
        created_by=caller_id,
    )
    session.add(expense)
    session.flush()
    return expense


def update_expense(
        expense_id: int,
        description: str,
        amount: Decimal,
        caller_id: int,
        session: Session,
) -> Expense:
    """
    Replaces description and amount on an expense the caller created.

    Raises:
      AppError(EXPENSE_NOT_FOUND, 404) — absent or created by someone else
    """
    expense = _get_owned_expense_or_404(expense_id, caller_id, session)
    expense.description = description
    expense.amount = amount
    session.flush()
    return expense


def delete_expense(expense_id: int, caller_id: int, session: Session) -> None:
    """
    Hard-deletes an expense the caller created.

    Raises:
      AppError(EXPENSE_NOT_FOUND, 404) — absent or created by someone else;
                                         nothing is deleted
    """
    expense = _get_owned_expense_or_404(expense_id, caller_id, session)
    session.delete(expense)
    session.flush()
