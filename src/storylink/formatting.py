"""Render the new pull request title and body."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import Story

TITLE_PLACEHOLDER = "-"

# A mention already wrapped as "[ch-123]" is left alone.
_BODY_MENTION_RE = re.compile(r"(?<!\[)(ch-?[0-9]{1,7})(?!\])", re.IGNORECASE)


def format_story_tag(story_id: str) -> str:
    return f"[ch-{story_id}]"


def generate_pr_title(story_ids: Iterable[str], story: Story | None, pr_title: str) -> str:
    """Append ``[ch-<id>]`` tags for *story_ids* to the title.

    A title that is just the placeholder ``-`` is replaced by the story name.
    """
    tags = " ".join(format_story_tag(sid) for sid in story_ids)
    if pr_title == TITLE_PLACEHOLDER:
        base = (story.name if story is not None else None) or ""
    else:
        base = pr_title
    return f"{base} {tags}".strip()


def generate_pr_body(pr_body: str | None) -> str:
    """Wrap every bare ``ch123`` / ``ch-123`` mention in square brackets."""
    if not pr_body:
        return ""
    return _BODY_MENTION_RE.sub(r"[\1]", pr_body)


def story_labels(story: Story | None) -> list[str]:
    if story is None or not story.story_type:
        return []
    return [story.story_type]


__all__ = [
    "TITLE_PLACEHOLDER",
    "format_story_tag",
    "generate_pr_body",
    "generate_pr_title",
    "story_labels",
]
