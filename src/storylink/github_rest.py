from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import GitHubAPIError
from .retry import run_with_retries

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "storylink/0.2.0"
HTTP_ERROR_STATUS = 400
DEFAULT_TIMEOUT = 30.0


@dataclass
class GitHubRestClient:
    """Minimal REST client for the pull request writes storylink performs."""

    token: str
    repo: str
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any | None = None,
    ) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

        def _run() -> requests.Response:
            return self._session.request(
                method,
                url,
                json=json_body,
                headers=self._session.headers,
                timeout=self.timeout,
            )

        response = run_with_retries(_run)
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GitHubAPIError(
                f"GitHub API {method} {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    def update_pull_request(self, number: int, *, title: str, body: str) -> Any:
        return self._request(
            "PATCH",
            f"/repos/{self.repo}/pulls/{number}",
            json_body={"title": title, "body": body},
        )

    def add_labels(self, number: int, labels: Iterable[str]) -> Any:
        return self._request(
            "POST",
            f"/repos/{self.repo}/issues/{number}/labels",
            json_body={"labels": list(labels)},
        )


__all__ = ["GitHubAPIError", "GitHubRestClient"]
