"""Legacy-v1 dialect: Maven 1 ``project.xml``.

Artifacts live at ``root/groupId/<type>s/artifactId-version.type``; the
layout has no room for a classifier.
"""

from __future__ import annotations

from jvmdeps.config import ResolverSettings
from jvmdeps.dialects import pom
from jvmdeps.models import Dependency, Dialect, Scope
from jvmdeps.registry import register_dialect, unique


class LegacyV1Dialect:
    dialect = Dialect.LEGACY_V1
    default_repository = "https://repo1.maven.org/maven"
    default_cache = "~/.maven/repository"
    default_manifest = "project.xml"
    transitive = False

    def parse_repositories(
        self, content: str | bytes, settings: ResolverSettings, source: str
    ) -> list[str]:
        root = pom.parse_xml(content, source)
        repositories = pom.texts(root, "/project/repository/url")
        if not repositories:
            repositories.append(self.default_repository)
        return unique(repositories)

    def parse_dependencies(
        self, content: str | bytes, scope: Scope, source: str
    ) -> list[Dependency]:
        return pom.parse_pom_dependencies(content, scope, source)

    def visible(self, dependency: Dependency, scope: Scope) -> bool:
        return pom.legacy_visible(dependency, scope)

    def build_path(self, root: str, dependency: Dependency) -> str:
        group = dependency.group_id
        artifact = dependency.artifact_id
        version = dependency.version
        kind = dependency.type
        return f"{str(root).rstrip('/')}/{group}/{kind}s/{artifact}-{version}.{kind}"


register_dialect(LegacyV1Dialect())
