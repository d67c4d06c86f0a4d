"""Shared pytest fixtures for jvmdeps tests — no network needed (mocked transport)."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from jvmdeps.config import ResolverSettings


class FakeRepository:
    """In-memory HTTP repository served through ``httpx.MockTransport``.

    ``files`` maps absolute URLs to bodies; anything else is a 404.
    Every requested URL is recorded in ``requests``.
    """

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.files:
            return httpx.Response(200, content=self.files[url])
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def offline_transport() -> httpx.MockTransport:
    """Transport that fails the test on any request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    return httpx.MockTransport(handler)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def settings(tmp_path: Path) -> ResolverSettings:
    """Settings isolated from the user's home: private cache, no settings.xml."""
    return ResolverSettings(
        cache_dir=tmp_path / "cache",
        http_timeout=5.0,
        redirect_limit=10,
        maven_settings=tmp_path / "no-such-settings.xml",
    )
