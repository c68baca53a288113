"""Shared test fixtures."""

from unittest.mock import MagicMock, patch

import pytest

HIPCHAT_ENV_VARS = ("HIPCHAT_TOKEN", "HIPCHAT_ROOM_ID", "HIPCHAT_FROM", "HIPCHAT_COLOR")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep HIPCHAT_* variables from the developer's shell out of the tests."""
    for name in HIPCHAT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_response(status_code: int = 204, reason: str = "No Content", text: str = "", headers=None) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.headers = headers or {}
    return response


@pytest.fixture()
def mock_post():
    """Patch requests.post as seen by the sender; defaults to a 204 reply."""
    with patch("hipchat_send.requests.post") as post:
        post.return_value = make_response()
        yield post
