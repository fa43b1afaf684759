"""Error taxonomy & redaction.

Central place for the exceptions storylink raises and for preparing any
error message before it reaches a log line or the CI runner.

Public API:
- StoryLinkError and its subclasses
- classify_error(exc) -> ErrorInfo
- redact(text, secrets=()) -> str

Configuration and event errors are fatal and abort a run before any work is
done; API errors are raised by the HTTP clients and caught by the
orchestrator at each external call.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

# Token shapes we can recognise without knowing the value
_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"ghs_[A-Za-z0-9]{20,40}"),  # GitHub Actions installation tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"(?i)(clubhouse-token[\"']?\s*[:=]\s*[\"']?)[A-Za-z0-9-]{8,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"
HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429


class StoryLinkError(RuntimeError):
    """Base class for all storylink failures."""


class ConfigError(StoryLinkError):
    """Missing credential or invalid configuration value."""


class EventError(StoryLinkError):
    """Trigger event payload is missing or lacks required fields."""


class APIError(StoryLinkError):
    """Raised when a remote API returns an error."""

    service = "api"

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
        payload: Any | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text
        self.payload = payload


class ClubhouseAPIError(APIError):
    """Raised when the Clubhouse REST API returns an error."""

    service = "clubhouse"


class GitHubAPIError(APIError):
    """Raised when the GitHub REST API returns an error."""

    service = "github"


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str, secrets: Iterable[str | None] = ()) -> str:
    """Redact sensitive tokens in arbitrary text.

    Known secret values are replaced first (longest first so a token that
    contains another is fully masked), then generic token shapes.
    """
    if not text:
        return text
    redacted = text
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        redacted = redacted.replace(secret, _REDACTION_PLACEHOLDER)
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException, secrets: Iterable[str | None] = ()) -> ErrorInfo:
    """Best-effort classification of an exception.

    - ConfigError / EventError -> 'config' / 'event'
    - Clubhouse 404 -> 'clubhouse.not_found'
    - GitHub 429 or rate-limit text -> 'github.rate_limit', transient
    - other API errors -> '<service>.api' (transient for 5xx)
    - network-y keywords -> 'network', transient
    - fallback -> 'generic'
    """
    secrets = tuple(secrets)
    msg = redact(str(exc) if exc else "", secrets)
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    if isinstance(exc, EventError):
        return ErrorInfo("event", msg, name)
    if isinstance(exc, APIError):
        details = {"status": exc.status} if exc.status is not None else None
        if isinstance(exc, ClubhouseAPIError) and exc.status == HTTP_NOT_FOUND:
            return ErrorInfo("clubhouse.not_found", msg, name, details=details)
        if exc.status == HTTP_TOO_MANY_REQUESTS or "rate limit" in low:
            return ErrorInfo(f"{exc.service}.rate_limit", msg, name, transient=True, details=details)
        transient = exc.status is not None and exc.status >= 500  # noqa: PLR2004
        return ErrorInfo(f"{exc.service}.api", msg, name, transient=transient, details=details)
    if any(k in low for k in ("timeout", "timed out", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", msg, name, transient=True)
    return ErrorInfo("generic", msg, name)


__all__ = [
    "APIError",
    "ClubhouseAPIError",
    "ConfigError",
    "ErrorInfo",
    "EventError",
    "GitHubAPIError",
    "StoryLinkError",
    "classify_error",
    "redact",
]
