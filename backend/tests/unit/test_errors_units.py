"""
Unit tests for AppError and the validation message walk in the app factory.
"""

from __future__ import annotations

from backend.app import _first_message
from backend.app.errors import UNAUTHORIZED_MESSAGE, AppError, ErrorCode, unauthorized


def test_app_error_body_is_message_only():
    err = AppError(ErrorCode.GROUP_NOT_FOUND, "Group not found or access denied", 404)
    assert err.to_dict() == {"error": "Group not found or access denied"}


def test_unauthorized_is_single_401():
    err = unauthorized()
    assert err.http_status == 401
    assert err.code == ErrorCode.UNAUTHORIZED
    assert err.message == UNAUTHORIZED_MESSAGE


def test_first_message_walks_nested_structures():
    assert _first_message({"amount": ["Amount is required"]}) == "Amount is required"
    assert _first_message({"_schema": {"name": ["Bad name"]}}) == "Bad name"


def test_first_message_falls_back_on_empty():
    assert _first_message({}) == "Invalid input."
    assert _first_message({"name": []}) == "Invalid input."


def test_app_error_carries_only_code_message_and_status():
    err = AppError(ErrorCode.DUPLICATE_EMAIL, "User already registered", 409)
    assert (err.code, err.message, err.http_status) == (
        ErrorCode.DUPLICATE_EMAIL,
        "User already registered",
        409,
    )
    assert not hasattr(err, "field")
