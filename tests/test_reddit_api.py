from __future__ import annotations

import asyncio

import pytest

from fixbot.adapters.reddit_api import (
    RedditApi,
    RedditApiError,
    publish_error_from_api_errors,
    publish_error_from_status,
)
from fixbot.adapters.reddit_publisher import RedditPublisher
from fixbot.core.errors import PublishError, PublishErrorKind
from fixbot.core.models import Message


def _api() -> RedditApi:
    return RedditApi(app_id="id", app_secret="secret", refresh_token="token", user_agent="test")


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (429, PublishErrorKind.RATE_LIMITED),
        (404, PublishErrorKind.NOT_FOUND),
        (403, PublishErrorKind.FORBIDDEN),
        (500, PublishErrorKind.UNKNOWN),
    ],
)
def test_publish_error_from_status(status: int, kind: PublishErrorKind) -> None:
    assert publish_error_from_status(status, "body").kind is kind


def test_publish_error_from_api_errors() -> None:
    assert publish_error_from_api_errors([]) is None

    error = publish_error_from_api_errors([["RATELIMIT", "you are doing that too much", "ratelimit"]])
    assert error is not None
    assert error.kind is PublishErrorKind.RATE_LIMITED
    assert "too much" in error.detail

    deleted = publish_error_from_api_errors([["DELETED_COMMENT", "that comment has been deleted", "parent"]])
    assert deleted is not None and deleted.kind is PublishErrorKind.NOT_FOUND

    odd = publish_error_from_api_errors(["SOMETHING_NEW"])
    assert odd is not None and odd.kind is PublishErrorKind.UNKNOWN


def test_post_comment_raises_on_api_errors(monkeypatch) -> None:
    api = _api()
    payload = {"json": {"errors": [["THREAD_LOCKED", "that thread is locked", "parent"]]}}
    monkeypatch.setattr(api, "_request", lambda *args, **kwargs: payload)

    with pytest.raises(PublishError) as excinfo:
        api.post_comment("t1_abc", "hello")
    assert excinfo.value.kind is PublishErrorKind.FORBIDDEN


def test_post_comment_wraps_token_failures(monkeypatch) -> None:
    api = _api()

    def _fail(*args, **kwargs):
        raise RedditApiError(401, "bad refresh token")

    monkeypatch.setattr(api, "_request", _fail)

    with pytest.raises(PublishError) as excinfo:
        api.post_comment("t1_abc", "hello")
    assert excinfo.value.kind is PublishErrorKind.UNKNOWN


def test_post_comment_success(monkeypatch) -> None:
    api = _api()
    calls = []

    def _request(method, path, params=None):
        calls.append((method, path, params))
        return {"json": {"errors": [], "data": {"things": []}}}

    monkeypatch.setattr(api, "_request", _request)
    api.post_comment("t1_abc", "hello")
    assert calls == [("POST", "/api/comment", {"api_type": "json", "thing_id": "t1_abc", "text": "hello"})]


def test_publisher_replies_under_original_comment() -> None:
    class _Api:
        def __init__(self) -> None:
            self.posted: list[tuple[str, str]] = []

        def post_comment(self, thing_id: str, text: str) -> dict:
            self.posted.append((thing_id, text))
            return {}

    api = _Api()
    message = Message(message_id="t1_abc", author="ana", body="mi esta kansa", source_id="Papiamento")
    asyncio.run(RedditPublisher(api).reply(message, "fixed"))
    assert api.posted == [("t1_abc", "fixed")]


def test_get_new_comments_wraps_read_errors(monkeypatch) -> None:
    api = _api()

    def _reset(*args, **kwargs):
        raise ConnectionResetError(104, "Connection reset by peer")

    monkeypatch.setattr(api, "_request", _reset)

    with pytest.raises(RedditApiError):
        api.get_new_comments("Papiamento")


def test_post_comment_read_timeout_is_a_timeout(monkeypatch) -> None:
    api = _api()

    def _timeout(*args, **kwargs):
        raise TimeoutError("The read operation timed out")

    monkeypatch.setattr(api, "_request", _timeout)

    with pytest.raises(PublishError) as excinfo:
        api.post_comment("t1_abc", "hello")
    assert excinfo.value.kind is PublishErrorKind.TIMEOUT
