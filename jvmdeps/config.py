"""Resolver settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from jvmdeps.exceptions import ConfigurationError

DEFAULT_HTTP_TIMEOUT = 30.0  # seconds
DEFAULT_REDIRECT_LIMIT = 10
DEFAULT_MAVEN_SETTINGS = "~/.m2/settings.xml"


@dataclass(frozen=True)
class ResolverSettings:
    """Knobs shared by the fetcher and the resolver.

    ``cache_dir`` overrides the dialect's default cache root when set.
    """

    cache_dir: Path | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    redirect_limit: int = DEFAULT_REDIRECT_LIMIT
    maven_settings: Path = Path(DEFAULT_MAVEN_SETTINGS).expanduser()

    @classmethod
    def from_env(cls) -> ResolverSettings:
        """Build settings from environment variables.

        Reads:
            JVMDEPS_CACHE_DIR       — cache root override
            JVMDEPS_HTTP_TIMEOUT    — per-request timeout in seconds (default: 30)
            JVMDEPS_REDIRECT_LIMIT  — maximum redirects per fetch (default: 10)
            JVMDEPS_MAVEN_SETTINGS  — user settings file (default: ~/.m2/settings.xml)
        """
        cache_dir = os.environ.get("JVMDEPS_CACHE_DIR")
        return cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
            http_timeout=_number("JVMDEPS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT, float),
            redirect_limit=_number("JVMDEPS_REDIRECT_LIMIT", DEFAULT_REDIRECT_LIMIT, int),
            maven_settings=Path(
                os.environ.get("JVMDEPS_MAVEN_SETTINGS", DEFAULT_MAVEN_SETTINGS)
            ).expanduser(),
        )


def _number(name: str, default, kind):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {raw!r}") from None
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value
