"""
routes/pages.py — Server-rendered screens.

Every request to this blueprint passes through the session guard first
(see middleware/session_guard.py), so handlers that need a user can rely on
g.user_id being set.

Screens:
  /             sign-in / sign-up form
  /dashboard    caller's groups
  /groups/:id   one group's expenses and their total
  /docs         public API reference

The screens render the initial state server-side; create/edit/delete go
through the JSON API from the page's script, then reload.
"""

from __future__ import annotations

from flask import Blueprint, g, redirect, render_template, request

from backend.app.errors import AppError
from backend.app.extensions import db
from backend.app.middleware.session_guard import DASHBOARD_PATH, guard_page_request
from backend.app.services import expense_service, group_service

pages_bp = Blueprint("pages", __name__)
pages_bp.before_request(guard_page_request)


# Rendered on /docs. Kept next to the routes it describes.
API_REFERENCE = [
    ("GET", "/api/health", "—", "Service liveness", "{status, timestamp, service}"),
    ("GET", "/api/groups", "—", "List your groups, newest first", "Group[]"),
    ("POST", "/api/groups", "{name}", "Create a group", "Group"),
    ("PUT", "/api/groups/{id}", "{name}", "Rename a group", "Group"),
    ("DELETE", "/api/groups/{id}", "—", "Delete a group and all of its expenses", "{success: true}"),
    ("GET", "/api/expenses/{groupId}", "—", "List a group's expenses, newest first", "Expense[]"),
    ("POST", "/api/expenses/{groupId}", "{description, amount}", "Record an expense", "Expense"),
    ("PUT", "/api/expense/{id}", "{description, amount}", "Update an expense", "Expense"),
    ("DELETE", "/api/expense/{id}", "—", "Delete an expense", "{success: true}"),
    ("POST", "/api/auth/sign-up", "{email, password, username?}", "Create an account", "{message}"),
    ("POST", "/api/auth/sign-in", "{email, password}", "Start a session", "{user}"),
    ("POST", "/api/auth/refresh", "—", "Renew the session cookie", "{success: true}"),
    ("POST", "/api/auth/sign-out", "—", "End the session", "{success: true}"),
    ("GET", "/api/auth/me", "—", "Your profile", "Profile"),
]


@pages_bp.route("/", methods=["GET"])
def sign_in():
    return render_template(
        "sign_in.html",
        confirmed=request.args.get("confirmed") == "1",
    )


@pages_bp.route("/dashboard", methods=["GET"])
def dashboard():
    groups = group_service.list_groups(caller_id=g.user_id, session=db.session)
    return render_template("dashboard.html", groups=groups)


@pages_bp.route("/groups/<int(max=2147483647):group_id>", methods=["GET"])
def group_detail(group_id: int):
    try:
        group = group_service.get_group(
            group_id=group_id,
            caller_id=g.user_id,
            session=db.session,
        )
    except AppError:
        # Screens do not show 404s for other tenants' groups; back to the list.
        return redirect(DASHBOARD_PATH)

    expenses = expense_service.list_expenses(
        group_id=group.id,
        caller_id=g.user_id,
        session=db.session,
    )
    return render_template(
        "group.html",
        group=group,
        expenses=expenses,
        total=expense_service.total_amount(expenses),
    )


@pages_bp.route("/docs", methods=["GET"])
def docs():
    return render_template("docs.html", endpoints=API_REFERENCE)
