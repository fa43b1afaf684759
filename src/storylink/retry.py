"""Centralized retry / backoff helpers.

Provides a single small function ``run_with_retries`` that encapsulates
exponential backoff with jitter for the HTTP clients. Transport failures
(connection errors, timeouts) and throttling / gateway responses
(429, 502, 503, 504) are retried; anything else is returned or raised
immediately.

Environment overrides:
  STORYLINK_RETRY_ATTEMPTS (default 3)
  STORYLINK_RETRY_BASE (seconds base, default 0.5)
  STORYLINK_RETRY_MAX_SLEEP (cap on a single sleep, seconds)
"""

from __future__ import annotations

import os
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import requests

from .errors import ConfigError
from .logging import get_logger

TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})

_JITTER = random.SystemRandom()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class RetryConfig:
    attempts: int = field(default_factory=lambda: _env_int("STORYLINK_RETRY_ATTEMPTS", 3))
    base_sleep: float = field(default_factory=lambda: _env_float("STORYLINK_RETRY_BASE", 0.5))


def is_transient(response: requests.Response) -> bool:
    return response.status_code in TRANSIENT_STATUSES


def _retry_after(response: requests.Response | None) -> float | None:
    """Return the ``Retry-After`` header in seconds if it is a positive number."""
    if response is None:
        return None
    raw = response.headers.get("Retry-After") if response.headers else None
    if not raw:
        return None
    try:
        val = float(raw)
    except ValueError:
        return None
    return val if val > 0 else None


def _compute_sleep(attempt: int, cfg: RetryConfig, response: requests.Response | None) -> float:
    explicit = _retry_after(response)
    backoff = cfg.base_sleep * (2 ** (attempt - 1)) + _JITTER.uniform(0, 0.25)
    sleep_for: float = explicit if explicit is not None else backoff
    max_cap_env = os.environ.get("STORYLINK_RETRY_MAX_SLEEP")
    if max_cap_env:
        try:
            cap = float(max_cap_env)
            if cap >= 0:
                sleep_for = min(sleep_for, cap)
        except ValueError:
            return sleep_for
    return sleep_for


def _sleep(attempt: int, attempts: int, sleep_for: float, reason: str) -> None:
    get_logger().warning(
        f"[retry] transient error ({reason}), attempt {attempt}/{attempts}, "
        f"sleeping {sleep_for:.2f}s",
        operation="retry",
    )
    time.sleep(sleep_for)


def run_with_retries(
    fn: Callable[[], requests.Response], *, cfg: RetryConfig | None = None
) -> requests.Response:
    cfg = cfg or RetryConfig()
    attempts = max(1, cfg.attempts)
    for attempt in range(1, attempts + 1):
        try:
            response = fn()
        except (requests.ConnectionError, requests.Timeout) as exc:
            if attempt >= attempts:
                raise
            _sleep(attempt, attempts, _compute_sleep(attempt, cfg, None), exc.__class__.__name__)
            continue
        if attempt < attempts and is_transient(response):
            _sleep(
                attempt,
                attempts,
                _compute_sleep(attempt, cfg, response),
                f"HTTP {response.status_code}",
            )
            continue
        return response
    raise RuntimeError("retry logic exited unexpectedly")  # pragma: no cover


__all__ = ["RetryConfig", "run_with_retries", "is_transient"]
