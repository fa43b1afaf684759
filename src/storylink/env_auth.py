"""Environment-based credential discovery for storylink.

Tokens come from the action inputs (``INPUT_GHTOKEN`` / ``INPUT_CHTOKEN``)
first, then from the conventional variable names, so the same entry point
works inside a workflow and from a developer shell with a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

GITHUB_TOKEN_VARS = ("INPUT_GHTOKEN", "GITHUB_TOKEN", "GH_TOKEN")
CLUBHOUSE_TOKEN_VARS = ("INPUT_CHTOKEN", "CLUBHOUSE_API_TOKEN", "CLUBHOUSE_TOKEN")


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_vars: tuple[str, ...] = GITHUB_TOKEN_VARS
    clubhouse_token_vars: tuple[str, ...] = CLUBHOUSE_TOKEN_VARS


class EnvironmentAuthManager:
    """Resolves the GitHub and Clubhouse tokens from the environment."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False
        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        """Load a .env file if one exists; existing variables win."""
        candidates = [self.config.dotenv_path] if self.config.dotenv_path else [".env", ".env.local"]
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path), override=False)
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return

    def _first_set(self, names: tuple[str, ...], label: str) -> str | None:
        for name in names:
            value = os.getenv(name)
            if value and value.strip():
                self.logger.debug(f"Found {label} token in {name}")
                return value.strip()
        return None

    def get_github_token(self) -> str | None:
        return self._first_set(self.config.github_token_vars, "GitHub")

    def get_clubhouse_token(self) -> str | None:
        return self._first_set(self.config.clubhouse_token_vars, "Clubhouse")

    def is_actions_environment(self) -> bool:
        return os.getenv("GITHUB_ACTIONS") == "true"


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "CLUBHOUSE_TOKEN_VARS",
    "GITHUB_TOKEN_VARS",
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "create_env_auth_manager",
]
