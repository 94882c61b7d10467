"""
routes/groups.py — Group route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return JSON.
  - No business logic. No DB queries. No bare SQL.

Endpoints (url_prefix=/api/groups):
  GET    /api/groups        → 200  caller's groups, newest first
  POST   /api/groups        → 200  create group
  PUT    /api/groups/:id    → 200  rename group
  DELETE /api/groups/:id    → 200  delete group and its expenses
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.app.extensions import db
from backend.app.middleware.auth_middleware import require_auth
from backend.app.models.group import Group
from backend.app.schemas.group_schema import GroupNameSchema
from backend.app.services import group_service

groups_bp = Blueprint("groups", __name__)


def _serialize_group(group: Group) -> dict:
    """Converts a Group ORM object to a plain dict for JSON output."""
    return {
        "id": group.id,
        "name": group.name,
        "created_by": group.created_by,
        "created_at": group.created_at.isoformat(),
    }


@groups_bp.route("", methods=["GET"])
@require_auth
def list_groups():
    """GET /api/groups — All groups owned by the caller."""
    groups = group_service.list_groups(
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify([_serialize_group(group) for group in groups]), 200


@groups_bp.route("", methods=["POST"])
@require_auth
def create_group():
    """POST /api/groups — Create a group owned by the caller."""
    data = GroupNameSchema().load(request.get_json(force=True) or {})
    group = group_service.create_group(
        name=data["name"],
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify(_serialize_group(group)), 200


@groups_bp.route("/<int(max=2147483647):group_id>", methods=["PUT"])
@require_auth
def update_group(group_id: int):
    """PUT /api/groups/:id — Rename one of the caller's groups."""
    data = GroupNameSchema().load(request.get_json(force=True) or {})
    group = group_service.update_group(
        group_id=group_id,
        name=data["name"],
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify(_serialize_group(group)), 200


@groups_bp.route("/<int(max=2147483647):group_id>", methods=["DELETE"])
@require_auth
def delete_group(group_id: int):
    """DELETE /api/groups/:id — Delete one of the caller's groups (expenses cascade)."""
    group_service.delete_group(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"success": True}), 200
