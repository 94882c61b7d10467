"""
schemas/auth_schema.py — Marshmallow schemas for authentication endpoints.

Validation responsibility:
  - This file: field types, lengths, formats.
  - services/auth_service.py: DUPLICATE_EMAIL (needs a DB lookup),
    credentials and confirmation state.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate, validates

# bcrypt only reads the first 72 bytes of a password and newer releases
# refuse anything longer.
MAX_PASSWORD_BYTES = 72
PASSWORD_TOO_LONG_MESSAGE = "Password cannot be longer than 72 bytes."


def _validate_password_length(value: str) -> None:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(PASSWORD_TOO_LONG_MESSAGE)


class SignUpSchema(Schema):
    """
    POST /api/auth/sign-up

      email    : valid email format, max 255
      password : min 6 chars, max 72 bytes (bcrypt limit)
      username : optional, 3–50 chars, letters, numbers, underscores
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        error_messages={
            "required": "Email is required",
            "invalid": "Unable to validate email address: invalid format",
        },
        validate=validate.Length(max=255),
    )

    password = fields.Str(
        required=True,
        load_only=True,
        error_messages={"required": "Password is required"},
    )

    # The form always posts the field; an empty string means "not given".
    username = fields.Str(
        required=False,
        allow_none=True,
        load_default=None,
    )

    @validates("password")
    def validate_password_strength(self, value: str, **kwargs) -> None:
        if len(value) < 6:
            raise ValidationError("Password should be at least 6 characters.")
        _validate_password_length(value)

    @validates("username")
    def validate_username(self, value: str | None, **kwargs) -> None:
        if value is None or value.strip() == "":
            return
        value = value.strip()
        if not 3 <= len(value) <= 50:
            raise ValidationError("Username must be between 3 and 50 characters.")
        if not all(c.isalnum() or c == "_" for c in value):
            raise ValidationError(
                "Username may only contain letters, numbers, and underscores."
            )

    @post_load
    def normalise(self, data: dict, **kwargs) -> dict:
        data["email"] = data["email"].strip().lower()
        username = data.get("username")
        data["username"] = username.strip() if username and username.strip() else None
        return data


class SignInSchema(Schema):
    """
    POST /api/auth/sign-in

    Credential correctness is checked in auth_service.py (401).
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.Str(
        required=True,
        error_messages={"required": "Email is required"},
    )
    password = fields.Str(
        required=True,
        load_only=True,
        error_messages={"required": "Password is required"},
        validate=_validate_password_length,
    )

    @post_load
    def normalise(self, data: dict, **kwargs) -> dict:
        data["email"] = data["email"].strip().lower()
        return data
