"""Pytest configuration for storylink tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and scrubs every environment variable
the action reads so tests never pick up real credentials from the host.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

_SCRUBBED_ENV = (
    "INPUT_GHTOKEN",
    "INPUT_CHTOKEN",
    "INPUT_DRYRUN",
    "INPUT_ONFETCHERROR",
    "INPUT_CONFIG",
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "CLUBHOUSE_API_TOKEN",
    "CLUBHOUSE_TOKEN",
    "GITHUB_ACTIONS",
    "GITHUB_EVENT_PATH",
    "GITHUB_OUTPUT",
    "GITHUB_API_URL",
    "STORYLINK_CONFIG",
    "STORYLINK_DEBUG",
    "STORYLINK_QUIET",
    "STORYLINK_LOG_JSON",
    "STORYLINK_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _SCRUBBED_ENV:
        monkeypatch.delenv(name, raising=False)
    # No real sleeping between retries
    monkeypatch.setenv("STORYLINK_RETRY_MAX_SLEEP", "0")
    monkeypatch.setenv("STORYLINK_RETRY_ATTEMPTS", "3")
    # Keep stray .env files in the checkout out of reach
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    # The global logger binds sys.stdout when created; rebuild it per test so
    # it writes to the stream capsys installed for that test.
    import storylink.logging as storylink_logging

    monkeypatch.setattr(storylink_logging, "_GLOBAL", None)
