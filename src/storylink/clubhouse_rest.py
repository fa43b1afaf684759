"""Read-only client for the Clubhouse v3 REST API.

Only the single call storylink needs is implemented: looking up one story by
its numeric id. Errors carry the decoded response payload so a caller can
fall back to it when the lookup fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import ClubhouseAPIError
from .models import Story
from .retry import run_with_retries

DEFAULT_API_URL = "https://api.clubhouse.io/api/v3"
USER_AGENT = "storylink/0.2.0"
HTTP_ERROR_STATUS = 400
DEFAULT_TIMEOUT = 30.0


def _decode(response: requests.Response) -> Any:
    if not response.text:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


@dataclass
class ClubhouseRestClient:
    token: str
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Clubhouse-Token", self.token)
        self._session.headers.setdefault("Content-Type", "application/json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def get_story(self, story_id: str) -> dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/stories/{story_id}"

        def _run() -> requests.Response:
            return self._session.request(
                "GET", url, headers=self._session.headers, timeout=self.timeout
            )

        response = run_with_retries(_run)
        payload = _decode(response)
        if response.status_code >= HTTP_ERROR_STATUS:
            raise ClubhouseAPIError(
                f"Clubhouse API GET {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
                payload=payload,
            )
        if not isinstance(payload, dict):
            raise ClubhouseAPIError(
                f"Clubhouse API GET {url} returned an unexpected payload",
                status=response.status_code,
                response_text=response.text,
                payload=payload,
            )
        return payload

    def fetch_story(self, story_id: str) -> Story:
        return Story.from_payload(self.get_story(story_id))


__all__ = ["ClubhouseAPIError", "ClubhouseRestClient"]
