"""Native dialect: a YAML list of dependency and repository entries.

Example ``dependencies.yml``::

    - repository: https://repo1.maven.org/maven2
    - group: junit
      artifact: junit
      version: 4.5
      scope: [test]

Every scalar is read as a string, so ``version: 1.10`` stays ``1.10``.
"""

from __future__ import annotations

from typing import Any

import yaml

from jvmdeps.config import ResolverSettings
from jvmdeps.exceptions import ManifestParseError, UnknownScopeError
from jvmdeps.models import Dependency, Dialect, Scope
from jvmdeps.registry import register_dialect, unique

# Manifest keys mapped onto Dependency fields; anything else lands in ``extra``.
_FIELDS = {
    "group": "group_id",
    "artifact": "artifact_id",
    "version": "version",
    "type": "type",
    "classifier": "classifier",
    "optional": "optional",
    "path": "path",
}


def maven_layout(root: str, dependency: Dependency) -> str:
    """``root/g/r/o/u/p/artifact/version/artifact-version[-classifier].type``"""
    group = dependency.group_id.replace(".", "/")
    artifact = dependency.artifact_id
    version = dependency.version
    name = f"{artifact}-{version}"
    if dependency.classifier:
        name = f"{name}-{dependency.classifier}"
    return f"{str(root).rstrip('/')}/{group}/{artifact}/{version}/{name}.{dependency.type}"


class NativeDialect:
    dialect = Dialect.NATIVE
    default_repository = "https://repo1.maven.org/maven2"
    default_cache = "~/.java/dependencies"
    default_manifest = "dependencies.yml"
    transitive = False

    def parse_repositories(
        self, content: str | bytes, settings: ResolverSettings, source: str
    ) -> list[str]:
        repositories: list[str] = []
        for entry in self._load(content, source):
            if "group" in entry:
                continue
            if entry.get("repository"):
                repositories.append(str(entry["repository"]))
            elif entry.get("repositories"):
                repositories.extend(str(url) for url in _as_list(entry["repositories"]))
        if not repositories:
            repositories.append(self.default_repository)
        return unique(repositories)

    def parse_dependencies(
        self, content: str | bytes, scope: Scope, source: str
    ) -> list[Dependency]:
        dependencies: list[Dependency] = []
        for entry in self._load(content, source):
            if "group" not in entry:
                continue
            dependency = self._to_dependency(entry, source)
            if self.visible(dependency, scope):
                dependencies.append(dependency)
        return dependencies

    def visible(self, dependency: Dependency, scope: Scope) -> bool:
        """No declared scope means visible in every scope."""
        if dependency.scope is None:
            return True
        return scope.value in dependency.scope

    def build_path(self, root: str, dependency: Dependency) -> str:
        return maven_layout(root, dependency)

    # ── internal ─────────────────────────────────────────────────────────

    @staticmethod
    def _load(content: str | bytes, source: str) -> list[dict[str, Any]]:
        try:
            # BaseLoader resolves no implicit types; every scalar stays a string.
            data = yaml.load(content, Loader=yaml.BaseLoader)
        except yaml.YAMLError as exc:
            raise ManifestParseError(source, str(exc)) from exc
        if data is None:
            return []
        if not isinstance(data, list):
            raise ManifestParseError(source, "expected a list of entries")
        for index, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise ManifestParseError(source, f"entry {index} is not a mapping")
        return data

    @staticmethod
    def _to_dependency(entry: dict[str, Any], source: str) -> Dependency:
        for key in ("group", "artifact", "version"):
            if not entry.get(key):
                raise ManifestParseError(
                    source, f"dependency {entry.get('group')!r} has no '{key}'"
                )

        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in entry.items():
            if key in _FIELDS:
                values[_FIELDS[key]] = value
            elif key != "scope":
                extra[key] = value

        for name in ("group_id", "artifact_id", "version", "type", "classifier", "path"):
            if values.get(name) is not None:
                values[name] = str(values[name])
        values["optional"] = str(values.get("optional", "")).lower() == "true"
        if not values.get("type"):
            values["type"] = "jar"

        scopes = None
        if entry.get("scope"):
            scopes = tuple(str(s) for s in _as_list(entry["scope"]))
            valid = [s.value for s in Scope]
            for name in scopes:
                if name not in valid:
                    raise UnknownScopeError(name, valid)

        return Dependency(scope=scopes, extra=extra, **values)


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


register_dialect(NativeDialect())
