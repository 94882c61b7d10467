"""
Unit tests for the page redirect rules. Pure function, no app needed.
"""

from __future__ import annotations

import pytest

from backend.app.middleware.session_guard import (
    DASHBOARD_PATH,
    DOCS_PATH,
    SIGN_IN_PATH,
    resolve_redirect,
)


@pytest.mark.parametrize(
    "path, authenticated, expected",
    [
        (SIGN_IN_PATH, False, None),
        (SIGN_IN_PATH, True, DASHBOARD_PATH),
        (DASHBOARD_PATH, False, SIGN_IN_PATH),
        (DASHBOARD_PATH, True, None),
        ("/groups/3", False, SIGN_IN_PATH),
        ("/groups/3", True, None),
        (DOCS_PATH, False, None),
        (DOCS_PATH, True, None),
    ],
)
def test_resolve_redirect(path, authenticated, expected):
    assert resolve_redirect(path, authenticated) == expected
