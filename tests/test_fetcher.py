"""Tests for ArtifactFetcher — repository fallback, redirects, streaming saves."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from jvmdeps.dialects.native import maven_layout
from jvmdeps.exceptions import DependencyNotFoundError, FetchError, RedirectLoopError
from jvmdeps.fetcher import ArtifactFetcher, is_local, redirect_target
from jvmdeps.models import Dependency

DEP = Dependency("org.example", "lib", "1.0")
ARTIFACT = "org/example/lib/1.0/lib-1.0.jar"


def _fetcher(repositories, handler, **kwargs) -> ArtifactFetcher:
    return ArtifactFetcher(
        repositories, maven_layout, transport=httpx.MockTransport(handler), **kwargs
    )


def _redirect_chain(hops: int):
    """Handler redirecting /hop/0 -> /hop/1 -> ... -> /hop/<hops>, which succeeds."""
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        n = int(request.url.path.rsplit("/", 1)[-1])
        if n < hops:
            return httpx.Response(302, headers={"Location": f"/hop/{n + 1}"})
        return httpx.Response(200, content=b"landed")

    handler.seen = seen
    return handler


# ── Helpers ──────────────────────────────────────────────────────────────


class TestHelpers:
    def test_redirect_absolute(self):
        assert redirect_target("http://a.example/x/y.jar", "http://b.example/z.jar") == (
            "http://b.example/z.jar"
        )

    def test_redirect_relative_uses_scheme_and_host(self):
        assert redirect_target("https://a.example:8080/x/y.jar", "/z/y.jar") == (
            "https://a.example:8080/z/y.jar"
        )

    def test_is_local(self):
        assert is_local("/srv/repo")
        assert is_local("file:///srv/repo")
        assert is_local("repo")
        assert not is_local("http://repo.example")
        assert not is_local("https://repo.example")


# ── Repository fallback ──────────────────────────────────────────────────


class TestRepositoryFallback:
    def test_first_success_wins_in_order(self):
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.host)
            if request.url.host == "r1.example":
                return httpx.Response(404)
            if request.url.host == "r2.example":
                raise httpx.ConnectError("refused", request=request)
            if request.url.host == "r3.example":
                return httpx.Response(200, content=b"from-r3")
            return httpx.Response(200, content=b"from-r4")

        repos = [f"http://r{i}.example/m2" for i in (1, 2, 3, 4)]
        with _fetcher(repos, handler) as fetcher:
            assert fetcher.fetch(DEP) == b"from-r3"
        assert calls == ["r1.example", "r2.example", "r3.example"]

    def test_builds_url_from_layout(self):
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, content=b"ok")

        with _fetcher(["http://repo.example/maven2"], handler) as fetcher:
            fetcher.fetch(DEP)
        assert urls == [f"http://repo.example/maven2/{ARTIFACT}"]

    def test_all_repositories_fail(self):
        repos = ["http://r1.example", "http://r2.example"]
        with _fetcher(repos, lambda r: httpx.Response(500)) as fetcher:
            with pytest.raises(DependencyNotFoundError) as exc_info:
                fetcher.fetch(DEP)
        assert exc_info.value.name == "lib:org.example:1.0:jar"
        assert "lib:org.example:1.0:jar" in str(exc_info.value)

    def test_redirect_loop_moves_to_next_repository(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "loop.example":
                return httpx.Response(301, headers={"Location": str(request.url)})
            return httpx.Response(200, content=b"good")

        repos = ["http://loop.example", "http://good.example"]
        with _fetcher(repos, handler, redirect_limit=3) as fetcher:
            assert fetcher.fetch(DEP) == b"good"

    def test_redirect_without_location_is_a_failure(self):
        with _fetcher(["http://r.example"], lambda r: httpx.Response(302)) as fetcher:
            with pytest.raises(FetchError, match="302"):
                fetcher.get("http://r.example/x.jar")

    def test_redirect_without_location_falls_back(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "r1.example":
                return httpx.Response(302)
            return httpx.Response(200, content=b"from-r2")

        repos = ["http://r1.example", "http://r2.example"]
        with _fetcher(repos, handler) as fetcher:
            assert fetcher.fetch(DEP) == b"from-r2"

    def test_local_directory_repository(self, tmp_path: Path):
        artifact = tmp_path / "repo" / ARTIFACT
        artifact.parent.mkdir(parents=True)
        artifact.write_bytes(b"on-disk")

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("network used")

        with _fetcher([str(tmp_path / "missing"), str(tmp_path / "repo")], handler) as fetcher:
            assert fetcher.fetch(DEP) == b"on-disk"


# ── Redirects ────────────────────────────────────────────────────────────


class TestRedirectBound:
    @pytest.mark.parametrize("limit", [0, 1, 3, 10])
    def test_exactly_limit_redirects_succeed(self, limit):
        handler = _redirect_chain(limit)
        with _fetcher([], handler, redirect_limit=limit) as fetcher:
            assert fetcher.get("http://r.example/hop/0") == b"landed"
        assert len(handler.seen) == limit + 1

    @pytest.mark.parametrize("limit", [0, 1, 3, 10])
    def test_one_more_redirect_fails(self, limit):
        handler = _redirect_chain(limit + 1)
        with _fetcher([], handler, redirect_limit=limit) as fetcher:
            with pytest.raises(RedirectLoopError) as exc_info:
                fetcher.get("http://r.example/hop/0")
        assert exc_info.value.limit == limit
        assert "redirect too deep" in str(exc_info.value)

    def test_streaming_follows_redirects(self, tmp_path: Path):
        handler = _redirect_chain(2)
        destination = tmp_path / "out" / "lib.jar"
        with _fetcher([], handler) as fetcher:
            fetcher.save("http://r.example/hop/0", destination)
        assert destination.read_bytes() == b"landed"


# ── Streaming saves ──────────────────────────────────────────────────────


class TestFetchToFile:
    def test_writes_destination(self, tmp_path: Path):
        destination = tmp_path / "cache" / ARTIFACT

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"payload")

        with _fetcher(["http://r.example"], handler) as fetcher:
            assert fetcher.fetch_to_file(DEP, destination) == destination
        assert destination.read_bytes() == b"payload"
        assert list(destination.parent.iterdir()) == [destination]

    def test_failed_download_leaves_nothing(self, tmp_path: Path):
        destination = tmp_path / "cache" / ARTIFACT
        with _fetcher(["http://r.example"], lambda r: httpx.Response(404)) as fetcher:
            with pytest.raises(DependencyNotFoundError):
                fetcher.fetch_to_file(DEP, destination)
        assert not destination.exists()

    def test_interrupted_body_leaves_no_cache_file(self, tmp_path: Path):
        destination = tmp_path / "cache" / ARTIFACT

        class BrokenStream(httpx.SyncByteStream):
            def __iter__(self):
                yield b"first-half"
                raise httpx.ReadError("connection reset")

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "broken.example":
                return httpx.Response(200, stream=BrokenStream())
            return httpx.Response(404)

        with _fetcher(["http://broken.example", "http://empty.example"], handler) as fetcher:
            with pytest.raises(DependencyNotFoundError):
                fetcher.fetch_to_file(DEP, destination)
        assert not destination.exists()
        assert list(destination.parent.iterdir()) == []


# ── Local path override ──────────────────────────────────────────────────


class TestLocalPathOverride:
    def _offline(self, request: httpx.Request) -> httpx.Response:
        raise AssertionError("network used")

    def test_relative_path_anchored_on_base_dir(self, tmp_path: Path):
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "local.jar").write_bytes(b"local")
        dep = Dependency("g", "local", "1", path="lib/local.jar")
        with _fetcher(["http://r.example"], self._offline, base_dir=tmp_path) as fetcher:
            assert fetcher.fetch(dep) == b"local"
            assert fetcher.fetch_to_file(dep, tmp_path / "unused.jar") == (
                tmp_path / "lib" / "local.jar"
            )
        assert not (tmp_path / "unused.jar").exists()

    def test_absolute_path(self, tmp_path: Path):
        jar = tmp_path / "abs.jar"
        jar.write_bytes(b"abs")
        dep = Dependency("g", "abs", "1", path=str(jar))
        with _fetcher([], self._offline, base_dir=Path("/elsewhere")) as fetcher:
            assert fetcher.fetch(dep) == b"abs"

    def test_missing_local_file(self, tmp_path: Path):
        dep = Dependency("g", "gone", "1", path="gone.jar")
        with _fetcher(["http://r.example"], self._offline, base_dir=tmp_path) as fetcher:
            with pytest.raises(DependencyNotFoundError, match="gone"):
                fetcher.fetch(dep)
            with pytest.raises(DependencyNotFoundError):
                fetcher.fetch_to_file(dep, tmp_path / "x.jar")
