"""
schemas/group_schema.py — Marshmallow schema for group endpoints.

Validation responsibility:
  - This file: field type, length, non-empty-after-trim check.
  - services/group_service.py: ownership (GROUP_NOT_FOUND, 404).

Unknown keys are dropped, not rejected, so clients may send back a full
group object on rename.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate


def _validate_non_empty_after_trim(value: str) -> None:
    """
    validate.Length(min=1) alone allows "   ". Strip first, then check,
    mirroring the DB CHECK(LENGTH(TRIM(name)) > 0).
    """
    if not value.strip():
        raise ValidationError("Group name is required")


class GroupNameSchema(Schema):
    """
    POST /api/groups and PUT /api/groups/:id

    name: non-empty after trim, max 100 chars.
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(
        required=True,
        error_messages={
            "required": "Group name is required",
            "null": "Group name is required",
            "invalid": "Group name must be a string",
        },
        validate=[
            validate.Length(
                min=1,
                max=100,
                error="Group name must be between 1 and 100 characters.",
            ),
            _validate_non_empty_after_trim,
        ],
    )
