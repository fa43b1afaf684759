from __future__ import annotations

import textwrap

import pytest

from storylink.config import load_config, parse_bool, parse_policy
from storylink.env_auth import EnvAuthConfig, EnvironmentAuthManager
from storylink.errors import ConfigError
from storylink.orchestrator import FetchFailurePolicy


def _auth() -> EnvironmentAuthManager:
    return EnvironmentAuthManager(EnvAuthConfig(load_dotenv=False))


@pytest.fixture
def tokens(monkeypatch):
    monkeypatch.setenv("INPUT_GHTOKEN", "gh-token")
    monkeypatch.setenv("INPUT_CHTOKEN", "ch-token")


def test_missing_github_token_is_fatal(monkeypatch):
    monkeypatch.setenv("INPUT_CHTOKEN", "ch-token")
    with pytest.raises(ConfigError, match="ghToken"):
        load_config(auth=_auth())


def test_missing_clubhouse_token_is_fatal(monkeypatch):
    monkeypatch.setenv("INPUT_GHTOKEN", "gh-token")
    with pytest.raises(ConfigError, match="chToken"):
        load_config(auth=_auth())


def test_defaults(tokens):
    cfg = load_config(auth=_auth())
    assert cfg.github_token == "gh-token"
    assert cfg.clubhouse_token == "ch-token"
    assert cfg.dry_run is False
    assert cfg.on_fetch_error is FetchFailurePolicy.DEGRADE
    assert cfg.clubhouse_api_url == "https://api.clubhouse.io/api/v3"
    assert cfg.github_api_url == "https://api.github.com"
    assert cfg.http_timeout == 30.0
    assert cfg.secrets == ("gh-token", "ch-token")


def test_tokens_do_not_appear_in_repr(tokens):
    cfg = load_config(auth=_auth())
    assert "gh-token" not in repr(cfg)
    assert "ch-token" not in repr(cfg)


def test_workflow_inputs(tokens, monkeypatch):
    monkeypatch.setenv("INPUT_DRYRUN", "true")
    monkeypatch.setenv("INPUT_ONFETCHERROR", "abort")
    cfg = load_config(auth=_auth())
    assert cfg.dry_run is True
    assert cfg.on_fetch_error is FetchFailurePolicy.ABORT


def test_yaml_file_and_explicit_arguments(tokens, tmp_path):
    path = tmp_path / "storylink.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            dry_run: true
            on_fetch_error: abort
            clubhouse:
              base_url: https://clubhouse.example/api/v3
            github:
              api_url: https://ghe.example/api/v3
            http:
              timeout: 5
            logging:
              json_enabled: true
              level: DEBUG
            """
        )
    )
    cfg = load_config(path, auth=_auth())
    assert cfg.dry_run is True
    assert cfg.on_fetch_error is FetchFailurePolicy.ABORT
    assert cfg.clubhouse_api_url == "https://clubhouse.example/api/v3"
    assert cfg.github_api_url == "https://ghe.example/api/v3"
    assert cfg.http_timeout == 5.0
    assert cfg.logging_json_enabled is True
    assert cfg.logging_level == "DEBUG"
    assert cfg.source_file == path

    overridden = load_config(path, dry_run=False, on_fetch_error="degrade", auth=_auth())
    assert overridden.dry_run is False
    assert overridden.on_fetch_error is FetchFailurePolicy.DEGRADE


def test_missing_config_file(tokens, tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml", auth=_auth())


def test_config_file_must_be_mapping(tokens, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path, auth=_auth())


def test_invalid_timeout(tokens, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("http:\n  timeout: 0\n")
    with pytest.raises(ConfigError, match="timeout"):
        load_config(path, auth=_auth())


def test_parse_bool():
    assert parse_bool("TRUE", name="x") is True
    assert parse_bool("false", name="x") is False
    assert parse_bool(True, name="x") is True
    with pytest.raises(ConfigError):
        parse_bool("maybe", name="x")


def test_parse_policy():
    assert parse_policy("Abort") is FetchFailurePolicy.ABORT
    with pytest.raises(ConfigError, match="degrade, abort"):
        parse_policy("ignore")


def test_malformed_retry_attempts_is_a_config_error(tokens, monkeypatch):
    monkeypatch.setenv("STORYLINK_RETRY_ATTEMPTS", "three")
    with pytest.raises(ConfigError, match="STORYLINK_RETRY_ATTEMPTS"):
        load_config(auth=_auth())
