"""Legacy-v2 dialect: Maven 2 ``pom.xml`` with transitive expansion.

Repositories are gathered from the POM's distribution management section,
then from the user's settings file (mirrors and profile repositories).
"""

from __future__ import annotations

from pathlib import Path

import structlog

from jvmdeps.config import ResolverSettings
from jvmdeps.dialects import pom
from jvmdeps.dialects.native import maven_layout
from jvmdeps.exceptions import ManifestParseError
from jvmdeps.models import Dependency, Dialect, Scope
from jvmdeps.registry import register_dialect, unique

log = structlog.get_logger("jvmdeps.dialects")


def settings_repositories(settings_file: Path) -> list[str]:
    """Mirror and profile repository URLs from a Maven settings file.

    Returns an empty list when the file is missing or unreadable.
    """
    try:
        content = settings_file.read_bytes()
    except OSError:
        return []
    try:
        root = pom.parse_xml(content, str(settings_file))
    except ManifestParseError as exc:
        log.debug("settings.unreadable", path=str(settings_file), error=exc.reason)
        return []
    return pom.texts(root, "/settings/mirrors/mirror/url") + pom.texts(
        root, "/settings/profiles/profile/repositories/repository/url"
    )


class LegacyV2Dialect:
    dialect = Dialect.LEGACY_V2
    default_repository = "https://repo1.maven.org/maven2"
    default_cache = "~/.m2/repository"
    default_manifest = "pom.xml"
    transitive = True

    def parse_repositories(
        self, content: str | bytes, settings: ResolverSettings, source: str
    ) -> list[str]:
        root = pom.parse_xml(content, source)
        repositories = pom.texts(root, "/project/distributionManagement/repository/url")
        repositories += settings_repositories(settings.maven_settings)
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
        return maven_layout(root, dependency)


register_dialect(LegacyV2Dialect())
