"""Data models shared by the manifest dialects, the fetcher and the resolver."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from jvmdeps.exceptions import UnknownDialectError, UnknownScopeError


class Scope(str, Enum):
    """Classpath scopes a caller may request."""

    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"

    @classmethod
    def parse(cls, value: str | Scope) -> Scope:
        """Return the scope named *value*, raising UnknownScopeError otherwise."""
        if isinstance(value, Scope):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownScopeError(value, [s.value for s in cls]) from None


class Dialect(str, Enum):
    """Supported manifest formats."""

    NATIVE = "native"
    LEGACY_V1 = "legacy-v1"
    LEGACY_V2 = "legacy-v2"

    @classmethod
    def parse(cls, value: str | Dialect) -> Dialect:
        if isinstance(value, Dialect):
            return value
        name = DIALECT_ALIASES.get(value, value)
        try:
            return cls(name)
        except ValueError:
            raise UnknownDialectError(value, [d.value for d in cls]) from None


# Names used by the original build tool.
DIALECT_ALIASES: dict[str, str] = {
    "bee": Dialect.NATIVE.value,
    "maven1": Dialect.LEGACY_V1.value,
    "maven2": Dialect.LEGACY_V2.value,
}


@dataclass(frozen=True)
class Dependency:
    """A library reference parsed from a manifest.

    ``scope`` is kept as declared: a list of scope names for the native
    dialect, a single scope name for the legacy dialects.  ``extra`` holds
    any other manifest keys, passed through untouched.
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str | None = None
    scope: str | tuple[str, ...] | None = None
    optional: bool = False
    path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def identity(self) -> tuple[str, str, str, str, str | None]:
        """Tuple that determines where this artifact lives in a repository."""
        return (self.group_id, self.artifact_id, self.version, self.type, self.classifier)

    @property
    def name(self) -> str:
        """Human-readable identity, ``artifactId:groupId:version:type``."""
        return f"{self.artifact_id}:{self.group_id}:{self.version}:{self.type}"

    def descriptor(self) -> Dependency:
        """The metadata-only (``pom``) artifact describing this dependency."""
        return replace(self, type="pom", classifier=None, path=None)
