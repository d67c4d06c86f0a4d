"""Dialect registry — map a manifest type tag to its parsing and layout rules."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from jvmdeps.config import ResolverSettings
from jvmdeps.models import Dependency, Dialect, Scope


@runtime_checkable
class ManifestDialect(Protocol):
    """Interface that every manifest dialect must satisfy."""

    dialect: Dialect
    default_repository: str
    default_cache: str
    default_manifest: str
    # Whether each dependency's own descriptor is expanded recursively.
    transitive: bool

    def parse_repositories(
        self, content: str | bytes, settings: ResolverSettings, source: str
    ) -> list[str]: ...

    def parse_dependencies(
        self, content: str | bytes, scope: Scope, source: str
    ) -> list[Dependency]: ...

    def visible(self, dependency: Dependency, scope: Scope) -> bool: ...

    def build_path(self, root: str, dependency: Dependency) -> str: ...


DIALECT_REGISTRY: dict[Dialect, ManifestDialect] = {}


def register_dialect(dialect: ManifestDialect) -> None:
    """Register a dialect instance by its tag."""
    DIALECT_REGISTRY[dialect.dialect] = dialect


def get_dialect(tag: str | Dialect) -> ManifestDialect:
    """Return the registered dialect for *tag* (aliases accepted)."""
    # Ensure dialects are registered before the first lookup.
    import jvmdeps.dialects  # noqa: F401

    return DIALECT_REGISTRY[Dialect.parse(tag)]


def unique(items: list[str]) -> list[str]:
    """Drop repeated entries, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))
