"""DependencyResolver — parse, expand, synchronize with the cache, build a classpath."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

import httpx
import structlog

from jvmdeps.cache import LocalCache
from jvmdeps.config import ResolverSettings
from jvmdeps.exceptions import (
    DependencyNotFoundError,
    FetchError,
    ManifestParseError,
    UnknownScopeError,
)
from jvmdeps.fetcher import ArtifactFetcher
from jvmdeps.models import Dependency, Dialect, Scope
from jvmdeps.registry import ManifestDialect, get_dialect

log = structlog.get_logger("jvmdeps.resolver")

# Failures that drop a transitive branch instead of aborting resolution.
# An unknown scope inside a fetched descriptor counts as a malformed descriptor.
EXPANSION_FAILURES: tuple[type[Exception], ...] = (
    DependencyNotFoundError,
    FetchError,
    ManifestParseError,
    UnknownScopeError,
    httpx.HTTPError,
    OSError,
)


class DependencyResolver:
    """Resolve the dependencies declared in one manifest for one scope.

    The repository list is computed at construction.  The dependency
    sequence is computed on first use and kept for the resolver's lifetime,
    even if the manifest changes on disk afterwards.
    """

    def __init__(
        self,
        manifest: str | Path,
        scope: str | Scope = Scope.COMPILE,
        verbose: bool = False,
        *,
        dialect: str | Dialect = Dialect.NATIVE,
        settings: ResolverSettings | None = None,
        cache_dir: str | Path | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._dialect: ManifestDialect = get_dialect(dialect)
        self._scope = Scope.parse(scope)
        self._manifest = Path(manifest)
        self._verbose = verbose
        settings = settings or ResolverSettings.from_env()

        self._repositories = self._dialect.parse_repositories(
            self._read_manifest(), settings, str(self._manifest)
        )
        root = cache_dir or settings.cache_dir or self._dialect.default_cache
        self._cache = LocalCache(Path(root).expanduser(), self._dialect.build_path)
        self._fetcher = ArtifactFetcher(
            self._repositories,
            self._dialect.build_path,
            base_dir=self._manifest.parent,
            timeout=settings.http_timeout,
            redirect_limit=settings.redirect_limit,
            verbose=verbose,
            transport=transport,
        )
        self._dependencies: list[Dependency] | None = None
        self._trace("resolver.repositories", repositories=self._repositories)

    # ── lifecycle ──────────────────────────────────────────────────────────

    def close(self) -> None:
        self._fetcher.close()

    def __enter__(self) -> DependencyResolver:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── public ─────────────────────────────────────────────────────────────

    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def repositories(self) -> list[str]:
        return list(self._repositories)

    @property
    def cache(self) -> LocalCache:
        return self._cache

    def resolve(self) -> list[Dependency]:
        """The scope-filtered dependency sequence, transitive where supported.

        Repeats are kept: a library reached through two branches appears twice.
        """
        if self._dependencies is None:
            dependencies = self._dialect.parse_dependencies(
                self._read_manifest(), self._scope, str(self._manifest)
            )
            if self._dialect.transitive:
                expanded = list(dependencies)
                for dependency in dependencies:
                    expanded += self._expand(dependency, set())
                dependencies = expanded
            self._dependencies = dependencies
        return list(self._dependencies)

    def synchronize(self) -> None:
        """Download every resolved dependency missing from the cache.

        ``path`` overrides are only checked for existence.
        """
        for dependency in self.resolve():
            if dependency.path:
                self._fetcher.fetch_to_file(dependency, self._cache.get(dependency))
                continue
            if self._cache.has(dependency):
                self._trace("cache.hit", dependency=dependency.name)
                continue
            self._fetcher.fetch_to_file(dependency, self._cache.get(dependency))

    def dependency_paths(self, directories: Iterable[str] | None = None) -> list[str]:
        """Paths of the resolved artifacts, followed by *directories*."""
        self.synchronize()
        paths = [str(self._artifact_path(d)) for d in self.resolve()]
        paths += [str(d) for d in directories or ()]
        return paths

    def classpath(self, directories: Iterable[str] | None = None) -> str:
        return os.pathsep.join(self.dependency_paths(directories))

    # ── internal ───────────────────────────────────────────────────────────

    def _read_manifest(self) -> bytes:
        try:
            return self._manifest.read_bytes()
        except OSError as exc:
            raise ManifestParseError(str(self._manifest), exc.strerror or str(exc)) from exc

    def _artifact_path(self, dependency: Dependency) -> Path:
        if dependency.path:
            return self._fetcher.local_path(dependency)
        return self._cache.get(dependency)

    def _expand(self, dependency: Dependency, expanding: set[tuple]) -> list[Dependency]:
        """Dependencies contributed by *dependency*'s own descriptor, recursively.

        *expanding* holds the descriptors on the current branch; meeting one
        again contributes nothing.
        """
        if dependency.path:
            return []
        descriptor = dependency.descriptor()
        if descriptor.identity in expanding:
            self._trace("resolver.cycle", dependency=descriptor.name)
            return []
        expanding.add(descriptor.identity)
        try:
            children = self._expand_or_empty(descriptor)
            contributed = list(children)
            for child in children:
                contributed += self._expand(child, expanding)
            return contributed
        finally:
            expanding.discard(descriptor.identity)

    def _expand_or_empty(self, descriptor: Dependency) -> list[Dependency]:
        try:
            content = self._load_descriptor(descriptor)
            return self._dialect.parse_dependencies(content, self._scope, descriptor.name)
        except EXPANSION_FAILURES as exc:
            self._trace("resolver.expand_failed", dependency=descriptor.name, error=str(exc))
            return []

    def _load_descriptor(self, descriptor: Dependency) -> bytes:
        if self._cache.has(descriptor):
            self._trace("cache.hit", dependency=descriptor.name)
            return self._cache.read(descriptor)
        content = self._fetcher.fetch(descriptor, announce=False)
        self._cache.put(descriptor, content)
        return content

    def _trace(self, event: str, **kw: object) -> None:
        if self._verbose:
            log.info(event, **kw)
        else:
            log.debug(event, **kw)


def resolve_dependency_paths(
    manifest: str | Path,
    dialect: str | Dialect = Dialect.NATIVE,
    scope: str | Scope = Scope.COMPILE,
    directories: Iterable[str] | None = None,
    verbose: bool = False,
    skip: bool = False,
    settings: ResolverSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> list[str] | None:
    """Resolve *manifest* and return artifact paths plus *directories*.

    Returns None without touching the manifest or the network when *skip*
    is set.
    """
    if skip:
        return None
    scope = Scope.parse(scope)
    log.info("resolver.start", manifest=str(manifest), scope=scope.value)
    with DependencyResolver(
        manifest,
        scope,
        verbose,
        dialect=dialect,
        settings=settings,
        transport=transport,
    ) as resolver:
        return resolver.dependency_paths(directories)


def build_classpath(
    manifest: str | Path,
    dialect: str | Dialect = Dialect.NATIVE,
    scope: str | Scope = Scope.COMPILE,
    directories: Iterable[str] | None = None,
    verbose: bool = False,
    skip: bool = False,
    settings: ResolverSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> str | None:
    """Classpath string for *manifest*, or None when *skip* is set."""
    paths = resolve_dependency_paths(
        manifest, dialect, scope, directories, verbose, skip, settings, transport
    )
    if paths is None:
        return None
    return os.pathsep.join(paths)
