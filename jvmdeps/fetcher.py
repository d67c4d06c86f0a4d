"""Artifact fetcher — local path overrides, repository fallback, redirects.

Repositories are tried strictly in order and the first one that delivers
the artifact wins.  A repository may be an ``http(s)://`` base URL, a
``file://`` URL or a plain directory.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urlparse

import httpx
import structlog

from jvmdeps.cache import partial_path
from jvmdeps.config import DEFAULT_HTTP_TIMEOUT, DEFAULT_REDIRECT_LIMIT
from jvmdeps.exceptions import DependencyNotFoundError, FetchError, RedirectLoopError
from jvmdeps.models import Dependency

log = structlog.get_logger("jvmdeps.fetcher")

_CHUNK_SIZE = 64 * 1024

# Failures that only disqualify the current repository.
REPOSITORY_FAILURES: tuple[type[Exception], ...] = (FetchError, httpx.HTTPError, httpx.InvalidURL)


def redirect_target(url: str, location: str) -> str:
    """Resolve a ``Location`` header against the URL that produced it."""
    return str(httpx.URL(url).join(location))


def is_local(repository: str) -> bool:
    scheme = urlparse(repository).scheme
    # A one-letter scheme is a Windows drive.
    return scheme in ("", "file") or len(scheme) == 1


def local_file(url: str) -> Path:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(parsed.path)
    return Path(url)


class ArtifactFetcher:
    """Retrieve artifact bytes for a dependency.

    *base_dir* anchors relative ``path`` overrides (the manifest's own
    directory).  *transport* is handed to the underlying ``httpx.Client``.
    """

    def __init__(
        self,
        repositories: Sequence[str],
        build_path: Callable[[str, Dependency], str],
        *,
        base_dir: Path = Path("."),
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        redirect_limit: int = DEFAULT_REDIRECT_LIMIT,
        verbose: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._repositories = list(repositories)
        self._build_path = build_path
        self._base_dir = Path(base_dir)
        self._redirect_limit = redirect_limit
        self._verbose = verbose
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=False,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ArtifactFetcher:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── public ─────────────────────────────────────────────────────────────

    @property
    def repositories(self) -> list[str]:
        return list(self._repositories)

    def local_path(self, dependency: Dependency) -> Path:
        """The file a ``path`` override points at, anchored on *base_dir*."""
        path = Path(dependency.path).expanduser()
        if not path.is_absolute():
            path = self._base_dir / path
        return path

    def fetch(self, dependency: Dependency, announce: bool = True) -> bytes:
        """Return the artifact's bytes from the first repository that has it."""
        self._announce(dependency, announce)
        if dependency.path:
            try:
                return self.local_path(dependency).read_bytes()
            except OSError as exc:
                raise DependencyNotFoundError(dependency.name) from exc
        for url in self._candidates(dependency):
            try:
                return self.get(url)
            except REPOSITORY_FAILURES as exc:
                log.debug("fetch.repository_failed", url=url, error=str(exc))
        raise DependencyNotFoundError(dependency.name)

    def fetch_to_file(
        self, dependency: Dependency, destination: Path, announce: bool = True
    ) -> Path:
        """Stream the artifact into *destination*, creating directories as needed.

        A ``path`` override is returned as-is; nothing is copied.
        """
        self._announce(dependency, announce)
        if dependency.path:
            path = self.local_path(dependency)
            if not path.is_file():
                raise DependencyNotFoundError(dependency.name)
            return path
        for url in self._candidates(dependency):
            try:
                self.save(url, destination)
                return destination
            except REPOSITORY_FAILURES as exc:
                log.debug("fetch.repository_failed", url=url, error=str(exc))
        raise DependencyNotFoundError(dependency.name)

    def get(self, url: str) -> bytes:
        """GET *url* following up to ``redirect_limit`` redirects."""
        if is_local(url):
            return self._read_local(url)
        with self._open(url) as response:
            return response.read()

    def save(self, url: str, destination: Path) -> None:
        """GET *url* and write the body to *destination* as it arrives."""
        if is_local(url):
            data = self._read_local(url)
            self._write(destination, iter([data]))
            return
        with self._open(url) as response:
            self._write(destination, response.iter_bytes(_CHUNK_SIZE))

    # ── internal ───────────────────────────────────────────────────────────

    def _candidates(self, dependency: Dependency) -> Iterator[str]:
        for repository in self._repositories:
            url = self._build_path(repository, dependency)
            self._trace("fetch.trying", url=url)
            yield url

    @contextmanager
    def _open(self, url: str) -> Iterator[httpx.Response]:
        """Yield the streamed terminal (non-redirect) response for *url*."""
        current = url
        for _ in range(self._redirect_limit + 1):
            self._trace("fetch.get", url=current)
            with self._client.stream("GET", current) as response:
                location = response.headers.get("location")
                if response.is_redirect and location:
                    current = redirect_target(current, location)
                    continue
                if not response.is_success:
                    raise FetchError(current, f"bad status code {response.status_code}")
                yield response
                return
        raise RedirectLoopError(url, self._redirect_limit)

    @staticmethod
    def _read_local(url: str) -> bytes:
        try:
            return local_file(url).read_bytes()
        except OSError as exc:
            raise FetchError(url, exc.strerror or str(exc)) from exc

    def _write(self, destination: Path, chunks: Iterator[bytes]) -> None:
        self._trace("fetch.save", path=str(destination))
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp = partial_path(destination)
        try:
            with open(tmp, "wb") as f:
                for chunk in chunks:
                    f.write(chunk)
            os.replace(tmp, destination)
        finally:
            tmp.unlink(missing_ok=True)

    def _announce(self, dependency: Dependency, announce: bool) -> None:
        if announce or self._verbose:
            log.info("fetch.downloading", dependency=dependency.name)

    def _trace(self, event: str, **kw: object) -> None:
        if self._verbose:
            log.info(event, **kw)
        else:
            log.debug(event, **kw)
