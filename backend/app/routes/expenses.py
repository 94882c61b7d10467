"""
routes/expenses.py — Expense route handlers.

Registered at url_prefix=/api because this blueprint owns BOTH the
group-scoped paths (/expenses/:groupId) and the expense-ID paths
(/expense/:id).

Layer rules:
  - Parse, validate, call ONE service, commit, return JSON.
  - No business logic. No DB queries. No bare SQL.
  - _serialize_expense() is a pure data-shape helper.

Endpoints:
  GET    /api/expenses/:groupId  → 200  group's expenses, newest first
  POST   /api/expenses/:groupId  → 200  record an expense
  PUT    /api/expense/:id        → 200  replace description and amount
  DELETE /api/expense/:id        → 200  delete
"""

from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, g, jsonify, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import require_auth
from backend.app.models.expense import Expense
from backend.app.schemas.expense_schema import ExpenseInputSchema
from backend.app.services import expense_service

expenses_bp = Blueprint("expenses", __name__)


# Pure data-shaping; amounts as 2-dp strings.

def _serialize_expense(expense: Expense) -> dict:
    """Converts an Expense ORM object to a plain dict for JSON output."""
    return {
        "id": expense.id,
        "description": expense.description,
        "amount": str(Decimal(expense.amount).quantize(Decimal("0.01"))),
        "group_id": expense.group_id,
        "created_by": expense.created_by,
        "created_at": expense.created_at.isoformat(),
    }


# ── Group-scoped expense routes ────────────────────────────────────────────

@expenses_bp.route("/expenses/<int(max=2147483647):group_id>", methods=["GET"])
@require_auth
def list_expenses(group_id: int):
    """GET /api/expenses/:groupId — Expenses of one of the caller's groups."""
    expenses = expense_service.list_expenses(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify([_serialize_expense(e) for e in expenses]), 200


@expenses_bp.route("/expenses/<int(max=2147483647):group_id>", methods=["POST"])
@require_auth
def create_expense(group_id: int):
    """POST /api/expenses/:groupId — Record an expense in one of the caller's groups."""
    data = ExpenseInputSchema().load(request.get_json(force=True) or {})
    expense = expense_service.create_expense(
        group_id=group_id,
        description=data["description"],
        amount=data["amount"],
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify(_serialize_expense(expense)), 200


# ── Expense-ID routes ──────────────────────────────────────────────────────

@expenses_bp.route("/expense/<int(max=2147483647):expense_id>", methods=["PUT"])
@require_auth
def update_expense(expense_id: int):
    """PUT /api/expense/:id — Update an expense the caller created."""
    data = ExpenseInputSchema().load(request.get_json(force=True) or {})
    expense = expense_service.update_expense(
        expense_id=expense_id,
        description=data["description"],
        amount=data["amount"],
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify(_serialize_expense(expense)), 200


@expenses_bp.route("/expense/<int(max=2147483647):expense_id>", methods=["DELETE"])
@require_auth
def delete_expense(expense_id: int):
    """DELETE /api/expense/:id — Delete an expense the caller created."""
    expense_service.delete_expense(
        expense_id=expense_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"success": True}), 200
