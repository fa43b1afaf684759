"""Reconcile story ids found in a pull request's title, body and branch.

Precedence is title > body > branch. The first id in that order is the
main story, the one whose name and type drive the new title and label.
Ids seen in the body or branch but not in the title are reported as
missing so they can be appended to the title as ``[ch-<id>]`` tags.
"""

from __future__ import annotations

from collections.abc import Sequence

from .extractor import extract_story_ids
from .logging import get_logger
from .models import PullRequest, StoryIds


def _unique(ids: Sequence[str]) -> list[str]:
    out: list[str] = []
    for story_id in ids:
        if story_id not in out:
            out.append(story_id)
    return out


def reconcile_story_ids(
    title_ids: Sequence[str],
    body_ids: Sequence[str],
    branch_ids: Sequence[str],
) -> StoryIds:
    """Pick the main story id and the ids missing from the title."""
    ordered = [*title_ids, *body_ids, *branch_ids]
    main_story_id = ordered[0] if ordered else None
    in_title = set(title_ids)
    missing = _unique([sid for sid in (*body_ids, *branch_ids) if sid not in in_title])
    return StoryIds(main_story_id=main_story_id, missing_from_title=tuple(missing))


def find_story_ids(pull_request: PullRequest) -> StoryIds:
    """Extract ids from each text source of *pull_request* and reconcile them."""
    log = get_logger()
    log.info(f"Branch Name: {pull_request.head_ref}")
    log.info(f"PR Title: {pull_request.title}")
    log.debug(f"PR Body: {pull_request.body}")

    found: dict[str, list[str]] = {}
    for source, label, text in (
        ("branch", "Branch Name", pull_request.head_ref),
        ("title", "PR Title", pull_request.title),
        ("body", "PR Body", pull_request.body),
    ):
        ids = extract_story_ids(text)
        found[source] = ids
        if ids:
            log.info(
                f"Found Clubhouse ID(s) in {label}: {', '.join(ids)}",
                source=source,
                story_ids=ids,
            )

    result = reconcile_story_ids(found["title"], found["body"], found["branch"])
    log.info(f"Concluded that main story is: {result.main_story_id}", story_id=result.main_story_id)
    log.info(f"Concluded that missing from PR title: {', '.join(result.missing_from_title)}")
    return result


__all__ = ["find_story_ids", "reconcile_story_ids"]
