"""
schemas/expense_schema.py — Marshmallow schema for expense endpoints.

Validation responsibility:
  - This file: description non-empty and length; amount is a finite decimal,
    strictly positive, at most 2 decimal places, fits NUMERIC(12, 2).
  - services/expense_service.py: ownership of the group or expense (404).

A rejected payload never reaches the service, so nothing is persisted.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate


# NUMERIC(12, 2) holds at most 10 integer digits.
MAX_AMOUNT = Decimal("9999999999.99")


def _validate_monetary_amount(value: Decimal) -> None:
    """
    Strictly positive, at most 2 decimal places, within column range.
    More than 2 decimal places is REJECTED, never rounded or truncated.
    """
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")

    # exponent is the negated number of decimal places:
    #   Decimal("10.123") → -3 → reject;  Decimal("10.12") → -2 → accept
    if value.as_tuple().exponent < -2:
        raise ValidationError("Amount must have at most 2 decimal places.")

    if value > MAX_AMOUNT:
        raise ValidationError("Amount is too large.")


def _validate_non_empty_after_trim(value: str) -> None:
    if not value.strip():
        raise ValidationError("Description is required")


class ExpenseInputSchema(Schema):
    """
    POST /api/expenses/:groupId and PUT /api/expense/:id

    Both fields are required on create and on update; an update replaces
    description and amount together.
    """

    class Meta:
        unknown = EXCLUDE

    description = fields.Str(
        required=True,
        error_messages={
            "required": "Description is required",
            "null": "Description is required",
            "invalid": "Description must be a string",
        },
        validate=[
            validate.Length(
                max=255,
                error="Description must be at most 255 characters.",
            ),
            _validate_non_empty_after_trim,
        ],
    )

    # Accepts JSON numbers or numeric strings. NaN and Infinity are refused
    # (allow_nan defaults to False).
    amount = fields.Decimal(
        required=True,
        error_messages={
            "required": "Amount is required",
            "null": "Amount is required",
            "invalid": "Amount must be a valid number.",
            "special": "Amount must be a finite number.",
        },
        validate=_validate_monetary_amount,
    )
