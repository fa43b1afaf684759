from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StoryIds:
    """Outcome of reconciling the identifiers found in a pull request.

    ``main_story_id`` is ``None`` when no source mentioned a story.
    """

    main_story_id: str | None
    missing_from_title: tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return self.main_story_id is not None


@dataclass(frozen=True)
class Story:
    """The parts of a Clubhouse story storylink reads."""

    id: str | None
    name: str | None
    story_type: str | None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    error: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Story:
        story_id = payload.get("id")
        name = payload.get("name")
        story_type = payload.get("story_type")
        return cls(
            id=str(story_id) if story_id is not None else None,
            name=name if isinstance(name, str) else None,
            story_type=story_type if isinstance(story_type, str) else None,
            raw=payload,
        )

    @classmethod
    def from_error(cls, story_id: str, payload: Any, error: str) -> Story:
        """Stand-in story built from a failed lookup's error payload."""
        mapping = payload if isinstance(payload, Mapping) else {}
        degraded = cls.from_payload(mapping)
        return cls(
            id=story_id,
            name=degraded.name,
            story_type=degraded.story_type,
            raw=mapping,
            error=error,
        )

    @property
    def degraded(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Repository:
    name: str
    owner: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PullRequest:
    """Snapshot of the pull request fields the action reads."""

    number: int
    title: str
    body: str
    head_ref: str


@dataclass(frozen=True)
class WriteResult:
    operation: str
    ok: bool
    error: str | None = None


__all__ = ["PullRequest", "Repository", "Story", "StoryIds", "WriteResult"]
