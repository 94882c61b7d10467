"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing").
    TestingConfig points at in-memory SQLite unless TEST_DATABASE_URL is set.
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Each user gets their own Flask test client, so their session cookies never
mix. Helper functions (not fixtures) cover the common operations:
  - sign_up(client, ...)         → HTTP response
  - confirm_email(app, client, email)
  - signed_in_client(app, email) → test client holding a live session
  - make_group(client, ...)      → group dict
  - make_expense(client, ...)    → HTTP response
"""

from __future__ import annotations

import pytest
from sqlalchemy import select

from backend.app import create_app
from backend.app.extensions import db as _db
from backend.app.models.user import User
from backend.app.services import auth_service

DEFAULT_PASSWORD = "Password1"


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the whole run."""
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes all rows after every test, children before parents."""
    yield

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test
        for table in reversed(_db.metadata.sorted_tables):
            _db.session.execute(table.delete())
        _db.session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixtures
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Anonymous Flask test client."""
    return app.test_client()


@pytest.fixture
def alice(app):
    """Test client signed in as alice@test.com."""
    return signed_in_client(app, "alice@test.com", username="alice")


@pytest.fixture
def bob(app):
    """Test client signed in as bob@test.com."""
    return signed_in_client(app, "bob@test.com", username="bob")


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def sign_up(client, email: str, password: str = DEFAULT_PASSWORD, username: str | None = None):
    payload = {"email": email, "password": password}
    if username is not None:
        payload["username"] = username
    return client.post("/api/auth/sign-up", json=payload)


def sign_in(client, email: str, password: str = DEFAULT_PASSWORD):
    return client.post("/api/auth/sign-in", json={"email": email, "password": password})


def confirmation_token_for(app, email: str) -> str:
    """Builds the token the confirmation e-mail would carry."""
    with app.app_context():
        user_id = _db.session.execute(
            select(User.id).where(User.email == email)
        ).scalar_one()
        return auth_service.create_confirmation_token(user_id)


def confirm_email(app, client, email: str):
    token = confirmation_token_for(app, email)
    return client.get(f"/api/auth/confirm?token={token}")


def signed_in_client(app, email: str, username: str | None = None):
    """Signs up, confirms and signs in a fresh user; returns their client."""
    user_client = app.test_client()
    resp = sign_up(user_client, email, username=username)
    assert resp.status_code == 201, f"sign_up failed: {resp.get_json()}"
    resp = confirm_email(app, user_client, email)
    assert resp.status_code == 302, f"confirm failed: {resp.get_json()}"
    resp = sign_in(user_client, email)
    assert resp.status_code == 200, f"sign_in failed: {resp.get_json()}"
    return user_client


def make_group(client, name: str = "Trip") -> dict:
    resp = client.post("/api/groups", json={"name": name})
    assert resp.status_code == 200, f"make_group failed: {resp.get_json()}"
    return resp.get_json()


def make_expense(client, group_id: int, description: str = "Dinner", amount=42.5):
    return client.post(
        f"/api/expenses/{group_id}",
        json={"description": description, "amount": amount},
    )
