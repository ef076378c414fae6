"""Minimal Reddit OAuth API client.

Uses blocking urllib calls; callers run them in a worker thread so the event
loop stays free for other sources.
"""

from __future__ import annotations

import base64
import json
import logging
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

from fixbot.core.errors import FixbotError, PublishError, PublishErrorKind

LOGGER = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
API_BASE_URL = "https://oauth.reddit.com"

# Renew the bearer token this many seconds before Reddit expires it.
TOKEN_EXPIRY_MARGIN = 60

_HTTP_ERROR_KINDS = {
    403: PublishErrorKind.FORBIDDEN,
    404: PublishErrorKind.NOT_FOUND,
    429: PublishErrorKind.RATE_LIMITED,
}

_API_ERROR_KINDS = {
    "RATELIMIT": PublishErrorKind.RATE_LIMITED,
    "DELETED_COMMENT": PublishErrorKind.NOT_FOUND,
    "DELETED_LINK": PublishErrorKind.NOT_FOUND,
    "NO_THING_ID": PublishErrorKind.NOT_FOUND,
    "THREAD_LOCKED": PublishErrorKind.FORBIDDEN,
    "TOO_OLD": PublishErrorKind.FORBIDDEN,
    "USER_BLOCKED": PublishErrorKind.FORBIDDEN,
}


class RedditApiError(FixbotError):
    """A Reddit request failed outside of publishing."""

    def __init__(self, status: Optional[int], detail: str) -> None:
        super().__init__(f"Reddit API error {status}: {detail}")
        self.status = status
        self.detail = detail


def publish_error_from_status(status: int, body: str) -> PublishError:
    return PublishError(_HTTP_ERROR_KINDS.get(status, PublishErrorKind.UNKNOWN), f"HTTP {status}: {body}")


def publish_error_from_api_errors(errors: list) -> Optional[PublishError]:
    """Map the ``json.errors`` array of a Reddit API answer to a PublishError."""

    if not errors:
        return None
    first = errors[0]
    if isinstance(first, (list, tuple)) and first:
        code = str(first[0])
        detail = " ".join(str(part) for part in first[1:] if part)
    else:
        code, detail = str(first), ""
    return PublishError(_API_ERROR_KINDS.get(code, PublishErrorKind.UNKNOWN), f"{code} {detail}".strip())


class RedditApi:
    """Thin OAuth client authenticating with an installed-app refresh token."""

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        refresh_token: str,
        user_agent: str,
        timeout: float = 10.0,
    ) -> None:
        self._app_id = app_id
        self._app_secret = app_secret
        self._refresh_token = refresh_token
        self._user_agent = user_agent
        self._timeout = timeout
        self._access_token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def _basic_auth(self) -> str:
        raw = f"{self._app_id}:{self._app_secret}".encode("utf-8")
        return "Basic " + base64.b64encode(raw).decode("ascii")

    def _token(self) -> str:
        with self._lock:
            if self._access_token and time.monotonic() < self._expires_at:
                return self._access_token

            data = urllib.parse.urlencode(
                {"grant_type": "refresh_token", "refresh_token": self._refresh_token}
            ).encode("utf-8")
            request = urllib.request.Request(TOKEN_URL, data=data, method="POST")
            request.add_header("Authorization", self._basic_auth())
            request.add_header("User-Agent", self._user_agent)
            try:
                with urllib.request.urlopen(request, timeout=self._timeout) as response:
                    payload = json.loads(response.read().decode("utf-8"))
            except urllib.error.HTTPError as e:
                body = e.read().decode("utf-8", errors="replace")
                raise RedditApiError(e.code, f"token refresh failed: {body}") from e

            token = payload.get("access_token")
            if not token:
                raise RedditApiError(None, f"token refresh returned no access_token: {payload}")
            expires_in = float(payload.get("expires_in", 3600))
            self._access_token = token
            self._expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
            LOGGER.debug("Reddit access token renewed, valid for %ss", int(expires_in))
            return token

    def _request(self, method: str, path: str, params: Optional[dict] = None) -> dict:
        url = f"{API_BASE_URL}{path}"
        data = None
        if method == "GET" and params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        elif params:
            data = urllib.parse.urlencode(params).encode("utf-8")

        request = urllib.request.Request(url, data=data, method=method)
        request.add_header("Authorization", f"bearer {self._token()}")
        request.add_header("User-Agent", self._user_agent)
        with urllib.request.urlopen(request, timeout=self._timeout) as response:
            return json.loads(response.read().decode("utf-8"))

    def get_new_comments(self, subreddit: str, limit: int = 100) -> dict:
        """Return the raw listing of the newest comments of a subreddit."""

        try:
            return self._request("GET", f"/r/{subreddit}/comments", {"limit": limit, "raw_json": 1})
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RedditApiError(e.code, body) from e
        except urllib.error.URLError as e:
            raise RedditApiError(None, str(e.reason)) from e
        # Errors while reading the answer (timeouts, resets, bad JSON) are not wrapped by urllib.
        except (OSError, ValueError) as e:
            raise RedditApiError(None, repr(e)) from e

    def post_comment(self, thing_id: str, text: str) -> dict:
        """Reply to ``thing_id``; raise PublishError when Reddit refuses."""

        try:
            payload = self._request(
                "POST",
                "/api/comment",
                {"api_type": "json", "thing_id": thing_id, "text": text},
            )
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise publish_error_from_status(e.code, body) from e
        except urllib.error.URLError as e:
            raise PublishError(PublishErrorKind.UNKNOWN, str(e.reason)) from e
        except RedditApiError as e:
            raise PublishError(PublishErrorKind.UNKNOWN, str(e)) from e
        except TimeoutError as e:
            raise PublishError(PublishErrorKind.TIMEOUT, repr(e)) from e
        except (OSError, ValueError) as e:
            raise PublishError(PublishErrorKind.UNKNOWN, repr(e)) from e

        error = publish_error_from_api_errors((payload.get("json") or {}).get("errors") or [])
        if error is not None:
            raise error
        return payload
