"""
services/auth_service.py — Authentication business logic.

Responsibilities:
  - Sign-up (User + Profile) and e-mail confirmation
  - Credential validation on sign-in
  - JWT access token creation (HS256)
  - Refresh token lifecycle (creation, validation, revocation)
  - Password hashing (bcrypt) and verification

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request, flask.g, or HTTP cookies
  - current_app is used ONLY to read JWT/bcrypt config and to log auth events

Token design:
  - Access token: JWT, HS256, sub = user_id (str), type = "access".
  - Confirmation token: JWT, HS256, sub = user_id (str),
    type = "email_confirmation". Rejected as a session token.
  - Refresh token: random hex string, stored in DB as SHA-256 hash only.
    The raw value is handed to the client once (as a cookie) and never stored.

Error messages are the ones the sign-in form shows verbatim.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timezone

import bcrypt
import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.errors import AppError, ErrorCode
from backend.app.models.profile import Profile
from backend.app.models.refresh_token import RefreshToken
from backend.app.models.user import User

ACCESS_TOKEN_TYPE = "access"
CONFIRMATION_TOKEN_TYPE = "email_confirmation"


# ── Private helpers ────────────────────────────────────────────────────────

def _hash_token(raw_token: str) -> str:
    """SHA-256 hex digest of a raw token string. Used for refresh token storage."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _encode(user_id: int, token_type: str, ttl) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + ttl,
        # Each issued token is unique even if generated in the same second.
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def _create_access_token(user_id: int) -> str:
    """Signed session JWT. TTL from JWT_ACCESS_TOKEN_EXPIRES."""
    return _encode(
        user_id,
        ACCESS_TOKEN_TYPE,
        current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
    )


def _create_refresh_token(user_id: int, session: Session) -> str:
    """
    Creates a refresh token, stores its SHA-256 hash, and returns the raw
    value to be sent to the client once.
    """
    raw_token = secrets.token_hex(32)
    expires_at = datetime.now(timezone.utc) + current_app.config["JWT_REFRESH_TOKEN_EXPIRES"]

    session.add(RefreshToken(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        expires_at=expires_at,
    ))
    # flush so the row exists before we return; commit is the route's job
    session.flush()

    return raw_token


def _build_profile_dict(profile: Profile) -> dict:
    """Serialises a Profile to a plain dict. No business logic."""
    return {
        "id": profile.id,
        "email": profile.email,
        "username": profile.username,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
    }


def create_confirmation_token(user_id: int) -> str:
    """Signed, expiring token embedded in the e-mail confirmation link."""
    return _encode(
        user_id,
        CONFIRMATION_TOKEN_TYPE,
        current_app.config["EMAIL_CONFIRMATION_EXPIRES"],
    )


# ── Public service functions ───────────────────────────────────────────────

def sign_up(
        email: str,
        password: str,
        username: str | None,
        session: Session,
) -> dict:
    """
    Creates a User and its Profile.

    When EMAIL_CONFIRMATION_REQUIRED is set the account stays unconfirmed and
    a confirmation token is returned for the route to deliver. Otherwise the
    account is confirmed immediately and no token is returned.

    Raises:
      AppError(DUPLICATE_EMAIL, 409) — email already registered

    Returns: {"user": {...profile...}, "confirmation_token": str | None}
    """
    existing = session.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()
    if existing is not None:
        raise AppError(
            ErrorCode.DUPLICATE_EMAIL,
            "User already registered",
            409,
        )

    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    password_hash = bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")

    confirmation_required = current_app.config.get("EMAIL_CONFIRMATION_REQUIRED", True)

    user = User(
        email=email,
        password_hash=password_hash,
        email_confirmed_at=None if confirmation_required else datetime.now(timezone.utc),
    )
    session.add(user)
    session.flush()  # populate user.id before creating the profile

    profile = Profile(id=user.id, email=email, username=username)
    session.add(profile)
    session.flush()

    current_app.logger.info("User %s signed up", user.id)

    return {
        "user": _build_profile_dict(profile),
        "confirmation_token": create_confirmation_token(user.id) if confirmation_required else None,
    }


def confirm_email(token: str, session: Session) -> int:
    """
    Marks the token's user as confirmed. Confirming twice is harmless.

    Raises:
      AppError(CONFIRMATION_TOKEN_INVALID, 400) — bad signature, wrong type,
                                                  expired, or unknown user

    Returns: the confirmed user's id
    """
    invalid = AppError(
        ErrorCode.CONFIRMATION_TOKEN_INVALID,
        "Email link is invalid or has expired",
        400,
    )
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.InvalidTokenError:
        raise invalid

    if payload.get("type") != CONFIRMATION_TOKEN_TYPE:
        raise invalid

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise invalid

    user = session.get(User, user_id)
    if user is None:
        raise invalid

    if user.email_confirmed_at is None:
        user.email_confirmed_at = datetime.now(timezone.utc)
        session.flush()
        current_app.logger.info("User %s confirmed their email", user_id)

    return user_id


def sign_in(email: str, password: str, session: Session) -> dict:
    """
    Validates credentials and issues an access + refresh token pair.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) — unknown email or wrong password.
        Same error for both to avoid account enumeration.
      AppError(EMAIL_NOT_CONFIRMED, 401) — correct credentials, unconfirmed

    Returns: {"user": {...}, "access_token": "...", "refresh_token": "..."}
    """
    user = session.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()

    # bcrypt.checkpw compares in constant time.
    if user is None or not bcrypt.checkpw(
            password.encode("utf-8"),
            user.password_hash.encode("utf-8"),
    ):
        current_app.logger.info("Rejected sign-in attempt")
        raise AppError(
            ErrorCode.INVALID_CREDENTIALS,
            "Invalid login credentials",
            401,
        )

    if not user.is_confirmed:
        raise AppError(
            ErrorCode.EMAIL_NOT_CONFIRMED,
            "Email not confirmed",
            401,
        )

    return {
        "user": _build_profile_dict(user.profile),
        "access_token": _create_access_token(user.id),
        "refresh_token": _create_refresh_token(user.id, session),
    }


def refresh_access_token(raw_refresh_token: str, session: Session) -> dict:
    """
    Validates a refresh token and issues a new access token.

    The refresh token is not rotated; it stays valid until it expires or is
    revoked by sign-out.

    Raises:
      AppError(REFRESH_TOKEN_INVALID, 401) — not found, revoked, or expired.

    Returns: {"user_id": int, "access_token": "..."}
    """
    record = session.execute(
        select(RefreshToken).where(RefreshToken.token_hash == _hash_token(raw_refresh_token))
    ).scalar_one_or_none()

    now = datetime.now(timezone.utc)
    if record is None or record.revoked or _as_utc(record.expires_at) <= now:
        raise AppError(
            ErrorCode.REFRESH_TOKEN_INVALID,
            "Unauthorized",
            401,
        )

    return {
        "user_id": record.user_id,
        "access_token": _create_access_token(record.user_id),
    }


def sign_out(raw_refresh_token: str | None, session: Session) -> None:
    """
    Revokes the refresh token if one is presented and still active.

    Signing out never fails: an unknown or already revoked token is ignored,
    since the route clears the cookies either way.
    """
    if not raw_refresh_token:
        return

    record = session.execute(
        select(RefreshToken).where(RefreshToken.token_hash == _hash_token(raw_refresh_token))
    ).scalar_one_or_none()

    if record is not None and not record.revoked:
        record.revoked = True
        session.flush()


def get_profile(user_id: int, session: Session) -> dict:
    """
    Returns the profile of the authenticated user.

    Raises:
      AppError(PROFILE_NOT_FOUND, 404) — user deleted after the token was issued
    """
    profile = session.get(Profile, user_id)
    if profile is None:
        raise AppError(
            ErrorCode.PROFILE_NOT_FOUND,
            "Profile not found",
            404,
        )
    return _build_profile_dict(profile)
