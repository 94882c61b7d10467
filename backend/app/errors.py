"""
errors.py — AppError base class and error code registry.

Every error returned by the API is an AppError carrying one of the codes
below. The response body is always {"error": "<message>"}; the code is kept
server-side for logging and tests.

Rules:
  - Services raise AppError; routes never catch it.
  - "Not found" and "not owned by the caller" share GROUP_NOT_FOUND /
    EXPENSE_NOT_FOUND (404). Never answer 403 for another tenant's row.
  - 401 means no valid session. There is no 403 in this API.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status

    def to_dict(self) -> dict:
        return {"error": self.message}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Input Errors (400) ─────────────────────────────────────────────────
    VALIDATION_ERROR           = "VALIDATION_ERROR"
    CONFIRMATION_TOKEN_INVALID = "CONFIRMATION_TOKEN_INVALID"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    DUPLICATE_EMAIL            = "DUPLICATE_EMAIL"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    PROFILE_NOT_FOUND          = "PROFILE_NOT_FOUND"
    GROUP_NOT_FOUND            = "GROUP_NOT_FOUND"
    EXPENSE_NOT_FOUND          = "EXPENSE_NOT_FOUND"

    # ── Auth Errors (401) ──────────────────────────────────────────────────
    UNAUTHORIZED               = "UNAUTHORIZED"
    INVALID_CREDENTIALS        = "INVALID_CREDENTIALS"
    EMAIL_NOT_CONFIRMED        = "EMAIL_NOT_CONFIRMED"
    REFRESH_TOKEN_INVALID      = "REFRESH_TOKEN_INVALID"

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"


# ── Canonical messages ─────────────────────────────────────────────────────
# Shared by the error handlers and the auth middleware so clients see the
# same strings everywhere.

UNAUTHORIZED_MESSAGE = "Unauthorized"
INTERNAL_ERROR_MESSAGE = "Internal server error"
GROUP_NOT_FOUND_MESSAGE = "Group not found or access denied"
EXPENSE_NOT_FOUND_MESSAGE = "Expense not found or access denied"


def unauthorized() -> AppError:
    """The single 401 used for every missing, malformed, or expired session."""
    return AppError(ErrorCode.UNAUTHORIZED, UNAUTHORIZED_MESSAGE, 401)
