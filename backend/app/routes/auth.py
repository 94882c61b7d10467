"""
routes/auth.py — Authentication route handlers.

Layer rules:
  - Parse request body and cookies
  - Validate with the appropriate schema (raises ValidationError on bad input)
  - Call exactly ONE service function
  - Commit the DB session
  - Set or clear the session cookies on the response

AppError propagates to the global error handler in app/__init__.py; routes
never catch it.

Endpoints (url_prefix=/api/auth):
  POST   /api/auth/sign-up   → 201  create account, send confirmation link
  GET    /api/auth/confirm   → 302  confirm e-mail, back to sign-in
  POST   /api/auth/sign-in   → 200  start a session (cookies)
  POST   /api/auth/refresh   → 200  new access token from refresh cookie
  POST   /api/auth/sign-out  → 200  revoke refresh token, clear cookies
  GET    /api/auth/me        → 200  caller's profile
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, redirect, request, url_for

from backend.app.errors import unauthorized
from backend.app.extensions import db
from backend.app.middleware.auth_middleware import (
    clear_session_cookies,
    require_auth,
    set_session_cookies,
)
from backend.app.schemas.auth_schema import SignInSchema, SignUpSchema
from backend.app.services import auth_service

auth_bp = Blueprint("auth", __name__)

CONFIRMATION_SENT_MESSAGE = "Check your email for the confirmation link!"
ACCOUNT_CREATED_MESSAGE = "Account created. You can sign in now."


@auth_bp.route("/sign-up", methods=["POST"])
def sign_up():
    """POST /api/auth/sign-up — Create account. (No auth required.)"""
    data = SignUpSchema().load(request.get_json(force=True) or {})
    result = auth_service.sign_up(
        email=data["email"],
        password=data["password"],
        username=data["username"],
        session=db.session,
    )
    db.session.commit()

    token = result["confirmation_token"]
    if token is None:
        return jsonify({"message": ACCOUNT_CREATED_MESSAGE}), 201

    # Mail delivery is not wired up; the link goes to the application log.
    link = url_for("auth.confirm", token=token, _external=True)
    current_app.logger.info(
        "Confirmation link for user %s: %s", result["user"]["id"], link
    )
    return jsonify({"message": CONFIRMATION_SENT_MESSAGE}), 201


@auth_bp.route("/confirm", methods=["GET"])
def confirm():
    """GET /api/auth/confirm?token=... — Target of the e-mailed link."""
    auth_service.confirm_email(
        token=request.args.get("token", ""),
        session=db.session,
    )
    db.session.commit()
    return redirect("/?confirmed=1")


@auth_bp.route("/sign-in", methods=["POST"])
def sign_in():
    """POST /api/auth/sign-in — Authenticate; set session cookies. (No auth required.)"""
    data = SignInSchema().load(request.get_json(force=True) or {})
    result = auth_service.sign_in(
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()

    response = jsonify({"user": result["user"]})
    return set_session_cookies(
        response,
        result["access_token"],
        result["refresh_token"],
    ), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    """POST /api/auth/refresh — Exchange the refresh cookie for a new access cookie."""
    raw_refresh = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if not raw_refresh:
        raise unauthorized()

    result = auth_service.refresh_access_token(
        raw_refresh_token=raw_refresh,
        session=db.session,
    )
    return set_session_cookies(jsonify({"success": True}), result["access_token"]), 200


@auth_bp.route("/sign-out", methods=["POST"])
def sign_out():
    """POST /api/auth/sign-out — Revoke refresh token and clear cookies. Always succeeds."""
    auth_service.sign_out(
        raw_refresh_token=request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]),
        session=db.session,
    )
    db.session.commit()
    g.session_cleared = True
    return clear_session_cookies(jsonify({"success": True})), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /api/auth/me — Return the caller's profile. (Auth required.)"""
    result = auth_service.get_profile(
        user_id=g.user_id,
        session=db.session,
    )
    return jsonify(result), 200
