"""Local artifact cache — a filesystem mirror laid out like the repository."""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable
from pathlib import Path

import structlog

from jvmdeps.models import Dependency

log = structlog.get_logger("jvmdeps.cache")


def partial_path(destination: Path) -> Path:
    """Temporary sibling used while *destination* is being written."""
    return destination.with_name(f"{destination.name}.part-{uuid.uuid4().hex[:8]}")


class LocalCache:
    """Read-through artifact cache.

    Presence of the file is the only validity check: there is no checksum
    and no freshness test.  Writes land in a temporary sibling first and are
    renamed into place, so a half-written file is never visible.
    """

    def __init__(self, root: Path, build_path: Callable[[str, Dependency], str]) -> None:
        self._root = Path(root)
        self._build_path = build_path

    @property
    def root(self) -> Path:
        return self._root

    def get(self, dependency: Dependency) -> Path:
        """Where *dependency* lives (or would live) in the cache."""
        return Path(self._build_path(str(self._root), dependency))

    def has(self, dependency: Dependency) -> bool:
        return self.get(dependency).is_file()

    def read(self, dependency: Dependency) -> bytes:
        return self.get(dependency).read_bytes()

    def put(self, dependency: Dependency, data: bytes) -> Path:
        destination = self.get(dependency)
        log.debug("cache.save", path=str(destination), size=len(data))
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp = partial_path(destination)
        try:
            tmp.write_bytes(data)
            os.replace(tmp, destination)
        finally:
            tmp.unlink(missing_ok=True)
        return destination
