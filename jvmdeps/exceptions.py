"""Custom exceptions for jvmdeps."""

from __future__ import annotations

from collections.abc import Iterable


class ResolverError(Exception):
    """Base exception for all dependency resolution errors."""


class ConfigurationError(ResolverError):
    """Raised when an environment setting cannot be interpreted."""


class ManifestParseError(ResolverError):
    """Raised when a manifest (or descriptor) is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot parse manifest '{source}': {reason}")


class UnknownScopeError(ResolverError):
    """Raised for a scope value outside the recognized enumeration."""

    def __init__(self, value: object, valid: Iterable[str]):
        self.value = value
        self.valid = list(valid)
        scopes = ", ".join(f"'{s}'" for s in self.valid)
        super().__init__(f"Unknown scope '{value}', must be one of {scopes}")


class UnknownDialectError(ResolverError):
    """Raised when the manifest type tag is not recognized."""

    def __init__(self, value: object, valid: Iterable[str]):
        self.value = value
        self.valid = list(valid)
        types = ", ".join(f"'{t}'" for t in self.valid)
        super().__init__(f"Unknown type '{value}', must be one of {types}")


class FetchError(ResolverError):
    """Raised when a single repository fails to deliver an artifact."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot fetch '{url}': {reason}")


class RedirectLoopError(FetchError):
    """Raised when a fetch exceeds the redirect bound."""

    def __init__(self, url: str, limit: int):
        self.limit = limit
        super().__init__(url, f"HTTP redirect too deep (limit {limit})")


class DependencyNotFoundError(ResolverError):
    """Raised when no repository (nor local path) yields the artifact."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Dependency '{name}' not found")
