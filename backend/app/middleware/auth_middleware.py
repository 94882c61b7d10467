"""
middleware/auth_middleware.py — Session resolution and the @require_auth decorator.

A session is an HS256 access JWT carried in the `access_token` cookie (or,
for non-browser clients, an "Authorization: Bearer <token>" header).

load_session():
  1. Reads the access token from the cookie or the Authorization header
  2. Decodes and verifies it (signature, expiry, type == "access")
  3. If that fails and a refresh cookie is present, asks auth_service for a
     new access token; the after_request hook below writes it back as a cookie
  4. Returns the caller's user_id, or None for an anonymous request

Strict responsibility boundary:
  - This module answers "who is calling?" (401) and nothing else.
  - Ownership checks belong in the service layer. Routes pass g.user_id to
    services as a plain int; services never import flask.g.
"""

from __future__ import annotations

import functools
from typing import Callable

import jwt
from flask import Flask, Response, current_app, g, request

from backend.app.errors import AppError, unauthorized
from backend.app.extensions import db
from backend.app.services import auth_service


def require_auth(f: Callable) -> Callable:
    """
    Route decorator that enforces an authenticated session.

    Attaches the authenticated user's ID to flask.g.user_id. Raises AppError
    (401 {"error": "Unauthorized"}) otherwise; the global error handler turns
    it into the JSON response. Routes never catch AppError.

    Usage:
        @groups_bp.route("", methods=["GET"])
        @require_auth
        def list_groups():
            user_id = g.user_id  # always an int when this runs
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        user_id = load_session()
        if user_id is None:
            raise unauthorized()
        g.user_id = user_id
        return f(*args, **kwargs)

    return decorated


def load_session() -> int | None:
    """
    Resolves the caller for the current request. Evaluated at most once per
    request; the result is cached on flask.g.
    """
    if "session_user_id" in g:
        return g.session_user_id

    user_id = _decode_access_token(_read_access_token())
    if user_id is None:
        user_id = _refresh_from_cookie()

    g.session_user_id = user_id
    return user_id


def _read_access_token() -> str | None:
    token = request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"])
    if token:
        return token

    parts = request.headers.get("Authorization", "").split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_access_token(raw_token: str | None) -> int | None:
    """Returns the `sub` claim as an int, or None for any invalid token."""
    if not raw_token:
        return None

    try:
        payload = jwt.decode(
            raw_token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.InvalidTokenError:
        # Covers expiry, bad signature, malformed token, invalid claims.
        return None

    # Confirmation-link tokens are signed with the same key.
    if payload.get("type") != auth_service.ACCESS_TOKEN_TYPE:
        return None

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def _refresh_from_cookie() -> int | None:
    raw_refresh = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not raw_refresh:
        return None

    try:
        result = auth_service.refresh_access_token(raw_refresh, db.session)
    except AppError:
        return None

    g.refreshed_access_token = result["access_token"]
    return result["user_id"]


# ── Cookie helpers ─────────────────────────────────────────────────────────

def set_session_cookies(
        response: Response,
        access_token: str,
        refresh_token: str | None = None,
) -> Response:
    config = current_app.config
    response.set_cookie(
        config["ACCESS_COOKIE_NAME"],
        access_token,
        max_age=int(config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds()),
        httponly=True,
        secure=config["SESSION_COOKIE_SECURE"],
        samesite=config["SESSION_COOKIE_SAMESITE"],
    )
    if refresh_token is not None:
        response.set_cookie(
            config["REFRESH_COOKIE_NAME"],
            refresh_token,
            max_age=int(config["JWT_REFRESH_TOKEN_EXPIRES"].total_seconds()),
            httponly=True,
            secure=config["SESSION_COOKIE_SECURE"],
            samesite=config["SESSION_COOKIE_SAMESITE"],
        )
    return response


def clear_session_cookies(response: Response) -> Response:
    config = current_app.config
    response.delete_cookie(config["ACCESS_COOKIE_NAME"])
    response.delete_cookie(config["REFRESH_COOKIE_NAME"])
    return response


def register_session_refresh(app: Flask) -> None:
    """Writes a silently refreshed access token back to the browser."""

    @app.after_request
    def persist_refreshed_session(response: Response) -> Response:
        token = g.get("refreshed_access_token")
        if token and not g.get("session_cleared"):
            set_session_cookies(response, token)
        return response
