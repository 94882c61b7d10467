"""routes/health.py — Unauthenticated liveness probe."""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """GET /api/health — Process is up. Does not touch the database."""
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": current_app.config["SERVICE_NAME"],
    }), 200
