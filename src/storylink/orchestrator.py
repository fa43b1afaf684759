"""Link a pull request to its Clubhouse story.

One run walks a fixed sequence of states:

    START -> NO_STORY                      (no ids anywhere, nothing to do)
    START -> FETCHING -> FETCH_FAILED      (lookup failed, policy "abort")
    START -> FETCHING -> COMPOSING -> [WRITING] -> DONE

The story lookup and the two pull request writes go through small
collaborator protocols so the flow can run against the real REST clients or
test doubles. Each write records its own ``WriteResult``; one failing never
undoes or skips the other.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from .errors import APIError, StoryLinkError, classify_error
from .formatting import generate_pr_body, generate_pr_title, story_labels
from .logging import get_logger
from .models import PullRequest, Story, StoryIds, WriteResult
from .reconcile import find_story_ids


class RunState(str, enum.Enum):
    START = "start"
    NO_STORY = "no_story"
    FETCHING = "fetching"
    FETCH_FAILED = "fetch_failed"
    COMPOSING = "composing"
    WRITING = "writing"
    DONE = "done"


class FetchFailurePolicy(str, enum.Enum):
    DEGRADE = "degrade"
    ABORT = "abort"


class StoryFetcher(Protocol):
    def fetch_story(self, story_id: str) -> Story: ...


class PullRequestWriter(Protocol):
    def update_pull_request(self, number: int, *, title: str, body: str) -> Any: ...

    def add_labels(self, number: int, labels: Iterable[str]) -> Any: ...


@dataclass(frozen=True)
class RunResult:
    state: RunState
    title: str
    body: str
    story_ids: StoryIds
    story: Story | None = None
    labels: tuple[str, ...] = ()
    writes: tuple[WriteResult, ...] = ()
    dry_run: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None or any(not w.ok for w in self.writes)

    @property
    def failure_message(self) -> str | None:
        if self.error is not None:
            return self.error
        for write in self.writes:
            if not write.ok:
                return write.error
        return None


def get_clubhouse_story(
    fetcher: StoryFetcher,
    story_id: str,
    *,
    policy: FetchFailurePolicy = FetchFailurePolicy.DEGRADE,
    secrets: Iterable[str | None] = (),
) -> Story | None:
    """Fetch *story_id*; on failure degrade to the error payload or return None."""
    log = get_logger()
    try:
        return fetcher.fetch_story(story_id)
    except (StoryLinkError, OSError) as exc:
        info = classify_error(exc, secrets)
        if policy is FetchFailurePolicy.ABORT:
            log.log_error(
                f"Failed to fetch Clubhouse story {story_id}",
                error=info.message,
                story_id=story_id,
                category=info.category,
            )
            return None
        payload = exc.payload if isinstance(exc, APIError) else None
        log.warning(
            f"Failed to fetch Clubhouse story {story_id}; continuing with error payload",
            story_id=story_id,
            error=info.message,
            category=info.category,
        )
        return Story.from_error(story_id, payload, info.message)


def _attempt_write(
    operation: str,
    call: Callable[[], Any],
    *,
    pr_number: int,
    secrets: Iterable[str | None],
) -> WriteResult:
    log = get_logger()
    try:
        call()
    except (StoryLinkError, OSError) as exc:
        info = classify_error(exc, secrets)
        log.log_error(
            f"{operation} failed for #{pr_number}",
            error=info.message,
            pr_number=pr_number,
            category=info.category,
        )
        return WriteResult(operation=operation, ok=False, error=info.message)
    return WriteResult(operation=operation, ok=True)


def fetch_story_and_update_pr(
    pull_request: PullRequest,
    *,
    fetcher: StoryFetcher,
    writer: PullRequestWriter | None,
    dry_run: bool = False,
    policy: FetchFailurePolicy = FetchFailurePolicy.DEGRADE,
    secrets: Iterable[str | None] = (),
) -> RunResult:
    """Tag the pull request title with its stories and label it by story type."""
    log = get_logger()
    secrets = tuple(secrets)
    story_ids = find_story_ids(pull_request)
    if story_ids.main_story_id is None:
        log.info("No Clubhouse ID(s) found")
        return RunResult(
            state=RunState.NO_STORY,
            title=pull_request.title,
            body=pull_request.body,
            story_ids=story_ids,
            dry_run=dry_run,
        )

    main_id = story_ids.main_story_id
    with log.timed_operation("fetch_story", story_id=main_id):
        story = get_clubhouse_story(fetcher, main_id, policy=policy, secrets=secrets)
    if story is None:
        return RunResult(
            state=RunState.FETCH_FAILED,
            title=pull_request.title,
            body=pull_request.body,
            story_ids=story_ids,
            dry_run=dry_run,
            error=f"Could not fetch Clubhouse story {main_id}",
        )

    new_title = generate_pr_title(story_ids.missing_from_title, story, pull_request.title)
    new_body = generate_pr_body(pull_request.body)
    labels = tuple(story_labels(story))

    if dry_run or writer is None:
        log.log_pr_action("update", pull_request.number, dry_run=True, title=new_title)
        return RunResult(
            state=RunState.DONE,
            title=new_title,
            body=new_body,
            story_ids=story_ids,
            story=story,
            labels=labels,
            dry_run=True,
        )

    log.info(f"Updating Title: {new_title}", pr_number=pull_request.number)
    writes = [
        _attempt_write(
            "update_pull_request",
            lambda: writer.update_pull_request(
                pull_request.number, title=new_title, body=new_body
            ),
            pr_number=pull_request.number,
            secrets=secrets,
        )
    ]
    if labels:
        log.info(f"Updating labels: {', '.join(labels)}", pr_number=pull_request.number)
        writes.append(
            _attempt_write(
                "add_labels",
                lambda: writer.add_labels(pull_request.number, labels),
                pr_number=pull_request.number,
                secrets=secrets,
            )
        )
    else:
        log.warning("Story has no type; skipping labels", story_id=main_id)
    log.log_pr_action("update", pull_request.number, dry_run=False, title=new_title)

    return RunResult(
        state=RunState.DONE,
        title=new_title,
        body=new_body,
        story_ids=story_ids,
        story=story,
        labels=labels,
        writes=tuple(writes),
        dry_run=False,
    )


__all__ = [
    "FetchFailurePolicy",
    "PullRequestWriter",
    "RunResult",
    "RunState",
    "StoryFetcher",
    "fetch_story_and_update_pr",
    "get_clubhouse_story",
]
