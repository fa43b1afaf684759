from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .clubhouse_rest import DEFAULT_API_URL as CLUBHOUSE_API_URL
from .env_auth import EnvAuthConfig, EnvironmentAuthManager, create_env_auth_manager
from .errors import ConfigError
from .github_rest import DEFAULT_API_URL as GITHUB_API_URL
from .orchestrator import FetchFailurePolicy
from .retry import RetryConfig

_TRUE = {"true", "True", "TRUE", "1", "yes"}
_FALSE = {"false", "False", "FALSE", "0", "no", ""}


@dataclass(frozen=True)
class ActionConfig:
    """Everything a run needs, resolved once at start-up."""

    github_token: str = field(repr=False)
    clubhouse_token: str = field(repr=False)
    dry_run: bool = False
    on_fetch_error: FetchFailurePolicy = FetchFailurePolicy.DEGRADE
    clubhouse_api_url: str = CLUBHOUSE_API_URL
    github_api_url: str = GITHUB_API_URL
    http_timeout: float = 30.0
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    source_file: Path | None = None

    @property
    def secrets(self) -> tuple[str, ...]:
        return (self.github_token, self.clubhouse_token)


def parse_bool(value: Any, *, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Input {name} must be a boolean (true/false), got {value!r}")


def parse_policy(value: Any) -> FetchFailurePolicy:
    try:
        return FetchFailurePolicy(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in FetchFailurePolicy)
        raise ConfigError(f"on_fetch_error must be one of: {choices}; got {value!r}") from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return cast(dict[str, Any], raw)


def _input(name: str) -> str | None:
    """Read a workflow input (``with: name:`` lands in ``INPUT_NAME``)."""
    value = os.environ.get(f"INPUT_{name.upper()}")
    return value.strip() if value is not None and value.strip() else None


def load_config(
    path: str | Path | None = None,
    *,
    dry_run: bool | None = None,
    on_fetch_error: str | None = None,
    auth: EnvironmentAuthManager | None = None,
) -> ActionConfig:
    """Build the run configuration.

    Precedence for each setting: explicit argument, workflow input, YAML file,
    default. Tokens only ever come from the environment.
    """
    auth = auth or create_env_auth_manager(EnvAuthConfig())
    github_token = auth.get_github_token()
    if not github_token:
        raise ConfigError("Input ghToken is required.")
    clubhouse_token = auth.get_clubhouse_token()
    if not clubhouse_token:
        raise ConfigError("Input chToken is required.")
    # Surface malformed STORYLINK_RETRY_* values before any request is made.
    RetryConfig()

    config_path = path or _input("config") or os.environ.get("STORYLINK_CONFIG")
    source_file = Path(config_path) if config_path else None
    raw = _read_yaml(source_file) if source_file else {}
    clubhouse = cast(dict[str, Any], raw.get("clubhouse", {}) or {})
    github = cast(dict[str, Any], raw.get("github", {}) or {})
    http = cast(dict[str, Any], raw.get("http", {}) or {})
    logging_config = cast(dict[str, Any], raw.get("logging", {}) or {})

    if dry_run is None:
        dry_input = _input("dryRun")
        dry_run = parse_bool(
            dry_input if dry_input is not None else raw.get("dry_run", False), name="dryRun"
        )
    policy_raw = on_fetch_error or _input("onFetchError") or raw.get("on_fetch_error", "degrade")

    try:
        timeout = float(http.get("timeout", 30.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"http.timeout must be a number, got {http.get('timeout')!r}") from exc
    if timeout <= 0:
        raise ConfigError("http.timeout must be positive")

    return ActionConfig(
        github_token=github_token,
        clubhouse_token=clubhouse_token,
        dry_run=dry_run,
        on_fetch_error=parse_policy(policy_raw),
        clubhouse_api_url=str(clubhouse.get("base_url", CLUBHOUSE_API_URL)),
        github_api_url=str(
            github.get("api_url") or os.environ.get("GITHUB_API_URL") or GITHUB_API_URL
        ),
        http_timeout=timeout,
        logging_json_enabled=parse_bool(
            os.environ.get("STORYLINK_LOG_JSON", logging_config.get("json_enabled", False)),
            name="logging.json_enabled",
        ),
        logging_level=str(
            os.environ.get("STORYLINK_LOG_LEVEL") or logging_config.get("level", "INFO")
        ),
        source_file=source_file,
    )


__all__ = ["ActionConfig", "ConfigError", "load_config", "parse_bool", "parse_policy"]
