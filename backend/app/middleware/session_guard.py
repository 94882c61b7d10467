"""
middleware/session_guard.py — Redirect rules for page (HTML) routes.

Two states, recomputed on every navigation from the session cookie:

  authenticated + sign-in screen          → redirect to the dashboard
  anonymous     + anything but sign-in
                  or the API reference    → redirect to sign-in

API routes are not guarded here; they answer 401 through @require_auth.
"""

from __future__ import annotations

from flask import g, redirect, request

from backend.app.middleware.auth_middleware import load_session

SIGN_IN_PATH = "/"
DASHBOARD_PATH = "/dashboard"
DOCS_PATH = "/docs"

PUBLIC_PATHS = frozenset({SIGN_IN_PATH, DOCS_PATH})


def resolve_redirect(path: str, authenticated: bool) -> str | None:
    """Returns the redirect target for `path`, or None to let the request through."""
    if authenticated and path == SIGN_IN_PATH:
        return DASHBOARD_PATH
    if not authenticated and path not in PUBLIC_PATHS:
        return SIGN_IN_PATH
    return None


def guard_page_request():
    """before_request hook for the pages blueprint."""
    user_id = load_session()
    target = resolve_redirect(request.path, user_id is not None)
    if target is not None:
        return redirect(target)
    g.user_id = user_id
    return None
