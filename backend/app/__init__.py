"""
app/__init__.py — Flask application factory.

Pattern: create_app(config_name) creates and returns a configured Flask app.
         Nothing is initialised at import time, which enables:
           - Multiple isolated test app instances
           - Clean separation between app creation and app startup
           - Alembic to import the metadata without starting the server

Responsibilities:
  1. Load configuration from config_by_name[config_name]
  2. Initialise SQLAlchemy via init_app()
  3. Register the JSON API blueprints under /api and the page blueprint at /
  4. Register global error handlers (everything becomes {"error": "..."})
  5. Register a custom JSON provider to serialise Decimal as string

Note on model imports:
  All model modules are imported inside create_app() so that SQLAlchemy's
  metadata is populated before Alembic or create_all() inspect it.
"""

from __future__ import annotations

import traceback
from decimal import Decimal

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from backend.config import config_by_name, validate_production_config


# ── Custom JSON provider ───────────────────────────────────────────────────
# Flask's default JSON encoder does not handle Decimal. Monetary amounts are
# serialised as strings to preserve precision.

class DecimalJSONProvider(DefaultJSONProvider):
    """
    Extends Flask's default JSON provider to serialise Decimal as str.

    Example: Decimal("10.50") → "10.50" (not 10.5 or 10.500000001)
    """

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


# ── Application factory ────────────────────────────────────────────────────

def create_app(config_name: str = "development") -> Flask:
    """
    Creates and returns a configured Flask application instance.

    Args:
        config_name: One of "development", "testing", "production".
                     Resolved via config_by_name in config.py.
                     Defaults to "development".
    """
    app = Flask(__name__)
    app.json_provider_class = DecimalJSONProvider
    app.json = DecimalJSONProvider(app)

    # ── Configuration ──────────────────────────────────────────────────────
    config_class = config_by_name.get(config_name, config_by_name["development"])
    app.config.from_object(config_class)

    if config_name == "production":
        validate_production_config(app)  # raises ValueError if misconfigured

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO").upper())

    # ── Extensions ─────────────────────────────────────────────────────────
    # Import here (not at module top) to avoid circular imports.
    from backend.app.extensions import db
    db.init_app(app)

    # ── Model registration ─────────────────────────────────────────────────
    # Import side effect populates the metadata.
    with app.app_context():
        from backend.app.models import (  # noqa: F401
            expense,
            group,
            profile,
            refresh_token,
            user,
        )

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_cors(app)

    from backend.app.middleware.auth_middleware import register_session_refresh
    register_session_refresh(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """
    Registers the API blueprints under /api and the page blueprint at /.

    The url_prefix is set here so individual route files only specify the
    path relative to their resource.
    """
    from backend.app.routes.auth import auth_bp
    from backend.app.routes.expenses import expenses_bp
    from backend.app.routes.groups import groups_bp
    from backend.app.routes.health import health_bp
    from backend.app.routes.pages import pages_bp

    app.register_blueprint(health_bp,   url_prefix="/api")
    app.register_blueprint(auth_bp,     url_prefix="/api/auth")
    app.register_blueprint(groups_bp,   url_prefix="/api/groups")
    # expenses_bp owns BOTH /expenses/<groupId> and /expense/<id>.
    app.register_blueprint(expenses_bp, url_prefix="/api")
    app.register_blueprint(pages_bp)


def _is_api_request() -> bool:
    return request.path == "/api" or request.path.startswith("/api/")


def _register_error_handlers(app: Flask) -> None:
    """
    Registers global error handlers. Every API failure leaves as
    {"error": "<message>"} with the matching status.

    Handlers:
      AppError        → its own message and status
      ValidationError → first marshmallow field message (400)
      SQLAlchemyError → rollback, logged, generic 500
      HTTPException   → reason phrase on /api paths; default page otherwise
      Exception       → generic 500; full traceback logged

    Stack traces never leave the server.
    """
    from backend.app.errors import INTERNAL_ERROR_MESSAGE, AppError
    from backend.app.extensions import db

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        """
        Converts an AppError raised anywhere in the request lifecycle
        (middleware, service, route) into the error body.
        """
        if error.http_status >= 500:
            app.logger.error("%r", error)
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """
        Returns the FIRST field message only. messages looks like
        {"amount": ["Amount must be greater than zero."]}.
        """
        return jsonify({"error": _first_message(error.messages)}), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error: SQLAlchemyError):
        db.session.rollback()
        app.logger.error(
            "Database error: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        if not _is_api_request():
            return error
        return jsonify({"error": error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """
        Catches all unhandled exceptions and returns a generic 500 response.
        The full traceback goes to the application logger.
        """
        app.logger.error(
            "Unhandled exception: %s\n%s",
            str(error),
            traceback.format_exc(),
        )
        return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500


def _first_message(messages) -> str:
    """Walks a marshmallow messages structure down to its first string."""
    while True:
        if isinstance(messages, dict):
            if not messages:
                break
            messages = next(iter(messages.values()))
        elif isinstance(messages, list):
            if not messages:
                break
            messages = messages[0]
        else:
            return str(messages)
    return "Invalid input."


def _register_cors(app: Flask) -> None:
    """
    Adds CORS headers for browser-based local development.

    Enabled when DEBUG or TESTING is true so a frontend served from another
    local port can call the API with its session cookie.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allow_all = bool(app.config.get("DEBUG") or app.config.get("TESTING"))

        if allow_all and origin:
            # Credentials require an explicit origin, never "*".
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"

        return response
