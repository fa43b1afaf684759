"""Load the ``pull_request`` trigger event the workflow runner hands us."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import EventError
from .models import PullRequest, Repository


def _require_mapping(payload: Mapping[str, Any], key: str, context: str) -> Mapping[str, Any]:
    value = payload.get(key)
    if not isinstance(value, Mapping):
        raise EventError(f"Event payload is missing '{context}{key}'")
    return value


def _require_str(payload: Mapping[str, Any], key: str, context: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise EventError(f"Event payload is missing '{context}{key}'")
    return value


def parse_pull_request(payload: Mapping[str, Any]) -> PullRequest:
    pr = _require_mapping(payload, "pull_request", "")
    head = _require_mapping(pr, "head", "pull_request.")
    number = pr.get("number")
    if not isinstance(number, int) or isinstance(number, bool):
        raise EventError("Event payload is missing 'pull_request.number'")
    body = pr.get("body")
    return PullRequest(
        number=number,
        title=_require_str(pr, "title", "pull_request."),
        body=body if isinstance(body, str) else "",
        head_ref=_require_str(head, "ref", "pull_request.head."),
    )


def parse_repository(payload: Mapping[str, Any]) -> Repository:
    repo = _require_mapping(payload, "repository", "")
    owner = _require_mapping(repo, "owner", "repository.")
    return Repository(
        name=_require_str(repo, "name", "repository."),
        owner=_require_str(owner, "login", "repository.owner."),
    )


def load_event(path: str | Path | None = None) -> tuple[PullRequest, Repository]:
    """Read the event JSON (default ``$GITHUB_EVENT_PATH``) into domain records."""
    event_path = path or os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        raise EventError("GITHUB_EVENT_PATH environment variable is required")
    p = Path(event_path)
    try:
        payload: Any = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise EventError(f"Event payload not found: {p}") from exc
    except json.JSONDecodeError as exc:
        raise EventError(f"Event payload {p} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise EventError(f"Event payload {p} must be a JSON object")
    return parse_pull_request(payload), parse_repository(payload)


__all__ = ["load_event", "parse_pull_request", "parse_repository"]
