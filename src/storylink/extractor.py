"""Find Clubhouse story ids (``ch123`` / ``ch-123``) in free text."""

from __future__ import annotations

import re

# No boundary after the digits: "ch1234567890" yields "1234567".
STORY_ID_RE = re.compile(r"(?<=ch)-?([0-9]{1,7})", re.IGNORECASE)


def extract_story_ids(content: str | None) -> list[str]:
    """Return story ids found in *content*, de-duplicated in first-seen order."""
    if not content:
        return []
    seen: list[str] = []
    for match in STORY_ID_RE.findall(content):
        if match not in seen:
            seen.append(match)
    return seen


__all__ = ["STORY_ID_RE", "extract_story_ids"]
