"""
tests/integration/test_expenses.py — Integration tests for expense endpoints.

Endpoints covered:
  GET    /api/expenses/:groupId  → 200
  POST   /api/expenses/:groupId  → 200
  PUT    /api/expense/:id        → 200
  DELETE /api/expense/:id        → 200

Amounts come back as strings with exactly two decimal places.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from backend.app.extensions import db
from backend.app.models.expense import Expense

from .conftest import make_expense, make_group


def _expense_count(app) -> int:
    with app.app_context():
        return db.session.execute(select(func.count(Expense.id))).scalar_one()


# ═══════════════════════════════════════════════════════════════════════════
# POST /api/expenses/:groupId
# ═══════════════════════════════════════════════════════════════════════════

class TestCreateExpense:

    def test_trip_dinner_scenario(self, alice):
        group = make_group(alice, "Trip")
        resp = make_expense(alice, group["id"], "Dinner", 42.5)
        assert resp.status_code == 200
        expense = resp.get_json()
        assert expense["description"] == "Dinner"
        assert expense["amount"] == "42.50"
        assert expense["group_id"] == group["id"]

        listed = alice.get(f"/api/expenses/{group['id']}").get_json()
        assert listed == [expense]

    def test_numeric_string_amount_accepted(self, alice):
        group = make_group(alice)
        resp = make_expense(alice, group["id"], "Taxi", "12.30")
        assert resp.status_code == 200
        assert resp.get_json()["amount"] == "12.30"

    @pytest.mark.parametrize(
        "amount, message",
        [
            (0, "Amount must be greater than zero."),
            (-5, "Amount must be greater than zero."),
            ("10.123", "Amount must have at most 2 decimal places."),
            ("abc", "Amount must be a valid number."),
            (None, "Amount is required"),
        ],
    )
    def test_invalid_amount_returns_400_and_persists_nothing(self, app, alice, amount, message):
        group = make_group(alice)
        resp = make_expense(alice, group["id"], "Dinner", amount)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": message}
        assert _expense_count(app) == 0

    def test_missing_description_returns_400(self, app, alice):
        group = make_group(alice)
        resp = alice.post(f"/api/expenses/{group['id']}", json={"amount": 10})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Description is required"}
        assert _expense_count(app) == 0

    def test_blank_description_returns_400(self, alice):
        group = make_group(alice)
        resp = make_expense(alice, group["id"], "   ", 10)
        assert resp.status_code == 400

    def test_missing_amount_returns_400(self, alice):
        group = make_group(alice)
        resp = alice.post(f"/api/expenses/{group['id']}", json={"description": "Dinner"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Amount is required"}

    def test_other_users_group_returns_404(self, app, alice, bob):
        group = make_group(alice)
        resp = make_expense(bob, group["id"], "Sneaky", 1)
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Group not found or access denied"}
        assert _expense_count(app) == 0

    def test_anonymous_returns_401(self, client):
        resp = make_expense(client, 1, "Dinner", 10)
        assert resp.status_code == 401


# ═══════════════════════════════════════════════════════════════════════════
# GET /api/expenses/:groupId
# ═══════════════════════════════════════════════════════════════════════════

class TestListExpenses:

    def test_empty_group(self, alice):
        group = make_group(alice)
        resp = alice.get(f"/api/expenses/{group['id']}")
        assert resp.status_code == 200
        assert resp.get_json() == []

    def test_newest_first(self, alice):
        group = make_group(alice)
        first = make_expense(alice, group["id"], "First", 1).get_json()
        second = make_expense(alice, group["id"], "Second", 2).get_json()
        ids = [e["id"] for e in alice.get(f"/api/expenses/{group['id']}").get_json()]
        assert ids == [second["id"], first["id"]]

    def test_only_that_groups_expenses(self, alice):
        trip = make_group(alice, "Trip")
        home = make_group(alice, "Home")
        make_expense(alice, trip["id"], "Dinner", 10)
        make_expense(alice, home["id"], "Rent", 500)
        listed = alice.get(f"/api/expenses/{trip['id']}").get_json()
        assert [e["description"] for e in listed] == ["Dinner"]

    def test_other_users_group_returns_404(self, alice, bob):
        group = make_group(alice)
        make_expense(alice, group["id"], "Dinner", 10)
        resp = bob.get(f"/api/expenses/{group['id']}")
        assert resp.status_code == 404

    def test_absent_group_returns_404(self, alice):
        assert alice.get("/api/expenses/999999").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# PUT /api/expense/:id
# ═══════════════════════════════════════════════════════════════════════════

class TestUpdateExpense:

    def test_update_replaces_fields(self, alice):
        group = make_group(alice)
        expense = make_expense(alice, group["id"], "Dinner", 42.5).get_json()
        resp = alice.put(
            f"/api/expense/{expense['id']}",
            json={"description": "Late dinner", "amount": "50"},
        )
        assert resp.status_code == 200
        updated = resp.get_json()
        assert updated["id"] == expense["id"]
        assert updated["description"] == "Late dinner"
        assert updated["amount"] == "50.00"

    def test_invalid_amount_keeps_old_values(self, alice):
        group = make_group(alice)
        expense = make_expense(alice, group["id"], "Dinner", 42.5).get_json()
        resp = alice.put(
            f"/api/expense/{expense['id']}",
            json={"description": "Dinner", "amount": 0},
        )
        assert resp.status_code == 400
        listed = alice.get(f"/api/expenses/{group['id']}").get_json()
        assert listed[0]["amount"] == "42.50"

    def test_other_users_expense_returns_404(self, alice, bob):
        group = make_group(alice)
        expense = make_expense(alice, group["id"], "Dinner", 42.5).get_json()
        resp = bob.put(
            f"/api/expense/{expense['id']}",
            json={"description": "Mine now", "amount": 1},
        )
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Expense not found or access denied"}

    def test_absent_expense_returns_404(self, alice):
        resp = alice.put("/api/expense/999999", json={"description": "x", "amount": 1})
        assert resp.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# DELETE /api/expense/:id
# ═══════════════════════════════════════════════════════════════════════════

class TestDeleteExpense:

    def test_delete_returns_success(self, alice):
        group = make_group(alice)
        expense = make_expense(alice, group["id"], "Dinner", 42.5).get_json()
        resp = alice.delete(f"/api/expense/{expense['id']}")
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}
        assert alice.get(f"/api/expenses/{group['id']}").get_json() == []

    def test_other_users_expense_returns_404_and_keeps_it(self, app, alice, bob):
        group = make_group(alice)
        expense = make_expense(alice, group["id"], "Dinner", 42.5).get_json()
        resp = bob.delete(f"/api/expense/{expense['id']}")
        assert resp.status_code == 404
        assert _expense_count(app) == 1

    def test_absent_expense_returns_404(self, alice):
        assert alice.delete("/api/expense/999999").status_code == 404

    def test_anonymous_returns_401(self, client):
        assert client.delete("/api/expense/1").status_code == 401
