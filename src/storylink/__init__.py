"""storylink - link GitHub pull requests to Clubhouse stories.

High-level public API:

from storylink import extract_story_ids, reconcile_story_ids, generate_pr_title

ids = reconcile_story_ids(
    extract_story_ids(title), extract_story_ids(body), extract_story_ids(branch)
)
new_title = generate_pr_title(ids.missing_from_title, story, title)

The CLI (``storylink run``) wires these to the Clubhouse and GitHub REST
clients and is what the GitHub Action invokes.
"""

from __future__ import annotations

from .config import ActionConfig, load_config
from .extractor import extract_story_ids
from .formatting import generate_pr_body, generate_pr_title
from .models import PullRequest, Repository, Story, StoryIds, WriteResult
from .orchestrator import (
    FetchFailurePolicy,
    RunResult,
    RunState,
    fetch_story_and_update_pr,
)
from .reconcile import find_story_ids, reconcile_story_ids

# Keep in sync with pyproject.toml
__version__ = "0.2.0"

__all__ = [
    "ActionConfig",
    "FetchFailurePolicy",
    "PullRequest",
    "Repository",
    "RunResult",
    "RunState",
    "Story",
    "StoryIds",
    "WriteResult",
    "extract_story_ids",
    "fetch_story_and_update_pr",
    "find_story_ids",
    "generate_pr_body",
    "generate_pr_title",
    "load_config",
    "reconcile_story_ids",
    "__version__",
]
