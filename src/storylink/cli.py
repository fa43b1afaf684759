"""storylink CLI.

Subcommands:
  run   -> link the triggering pull request to its Clubhouse story
           (the GitHub Action entry point)
  scan  -> offline preview: show the story ids found in a branch / title /
           body and the annotated body, without any API calls

Every failure is reported as a workflow ``::error::`` annotation with a
non-zero exit code; nothing propagates past ``main``.
"""

from __future__ import annotations

import argparse
import json
import os
from typing import Any

from storylink.actions import set_failed, set_output, set_secret
from storylink.clubhouse_rest import ClubhouseRestClient
from storylink.config import ActionConfig, load_config
from storylink.env_auth import EnvAuthConfig, create_env_auth_manager
from storylink.errors import StoryLinkError, classify_error, redact
from storylink.event import load_event
from storylink.extractor import extract_story_ids
from storylink.formatting import generate_pr_body, generate_pr_title
from storylink.github_rest import GitHubRestClient
from storylink.logging import configure_logging, get_logger
from storylink.models import PullRequest
from storylink.orchestrator import FetchFailurePolicy, fetch_story_and_update_pr
from storylink.reconcile import reconcile_story_ids

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="storylink", description="Link pull requests to Clubhouse stories"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Only print errors (env: STORYLINK_QUIET=1)",
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pr = sub.add_parser("run", help="Tag and label the triggering pull request")
    pr.add_argument("--config", help="YAML config file (env: INPUT_CONFIG)")
    pr.add_argument("--event-path", help="Event JSON (default: $GITHUB_EVENT_PATH)")
    pr.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the new title/body without writing to GitHub",
    )
    pr.add_argument(
        "--on-fetch-error",
        choices=[policy.value for policy in FetchFailurePolicy],
        help="What to do when the story lookup fails (default: degrade)",
    )
    pr.add_argument("--dotenv", help="Load credentials from this .env file")

    ps = sub.add_parser("scan", help="Preview story ids found in PR text (no API calls)")
    ps.add_argument("--branch", default="")
    ps.add_argument("--title", default="")
    ps.add_argument("--body", default="")
    ps.add_argument("--pretty", action="store_true")
    return p


def _is_quiet(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "quiet", False) or os.environ.get("STORYLINK_QUIET") == "1")


def _build_clients(cfg: ActionConfig, repo: str) -> tuple[ClubhouseRestClient, GitHubRestClient]:
    clubhouse = ClubhouseRestClient(
        token=cfg.clubhouse_token, base_url=cfg.clubhouse_api_url, timeout=cfg.http_timeout
    )
    github = GitHubRestClient(
        token=cfg.github_token, repo=repo, base_url=cfg.github_api_url, timeout=cfg.http_timeout
    )
    return clubhouse, github


def _cmd_run(args: argparse.Namespace) -> int:
    auth = create_env_auth_manager(EnvAuthConfig(dotenv_path=args.dotenv))
    cfg = load_config(
        args.config,
        dry_run=True if args.dry_run else None,
        on_fetch_error=args.on_fetch_error,
        auth=auth,
    )
    set_secret(cfg.github_token)
    set_secret(cfg.clubhouse_token)
    level = "WARNING" if _is_quiet(args) else cfg.logging_level
    configure_logging(json_logging=cfg.logging_json_enabled, level=level)

    pull_request, repository = load_event(args.event_path)
    clubhouse, github = _build_clients(cfg, repository.full_name)
    result = fetch_story_and_update_pr(
        pull_request,
        fetcher=clubhouse,
        writer=github,
        dry_run=cfg.dry_run,
        policy=cfg.on_fetch_error,
        secrets=cfg.secrets,
    )
    set_output("title", result.title)
    if not _is_quiet(args):
        print(result.title)
    if result.failed:
        return set_failed(redact(result.failure_message or "storylink run failed", cfg.secrets))
    return 0


def _cmd_scan(args: argparse.Namespace) -> int:
    pull_request = PullRequest(number=0, title=args.title, body=args.body, head_ref=args.branch)
    branch_ids = extract_story_ids(pull_request.head_ref)
    title_ids = extract_story_ids(pull_request.title)
    body_ids = extract_story_ids(pull_request.body)
    story_ids = reconcile_story_ids(title_ids, body_ids, branch_ids)
    report = {
        "branch_ids": branch_ids,
        "title_ids": title_ids,
        "body_ids": body_ids,
        "main_story_id": story_ids.main_story_id,
        "missing_from_title": list(story_ids.missing_from_title),
        "title": generate_pr_title(story_ids.missing_from_title, None, pull_request.title),
        "body": generate_pr_body(pull_request.body),
    }
    print(json.dumps(report, indent=2 if args.pretty else None))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    handlers = {
        "run": lambda: _cmd_run(args),
        "scan": lambda: _cmd_scan(args),
    }
    handler = handlers.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    try:
        return handler()
    except StoryLinkError as exc:
        info = classify_error(exc, _known_secrets())
        get_logger().log_error(f"{args.cmd} failed", error=info.message, category=info.category)
        return set_failed(info.message)
    except Exception as exc:
        info = classify_error(exc, _known_secrets())
        get_logger().log_error(f"{args.cmd} crashed", error=info.message, category=info.category)
        return set_failed(info.message)


def _known_secrets() -> tuple[str, ...]:
    auth = create_env_auth_manager(EnvAuthConfig(load_dotenv=False))
    return tuple(t for t in (auth.get_github_token(), auth.get_clubhouse_token()) if t)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
