"""Helpers shared by the Maven-style XML dialects."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from jvmdeps.exceptions import ManifestParseError, UnknownScopeError
from jvmdeps.models import Dependency, Scope

DEFAULT_SCOPE = "compile"

# For a given dependency scope, the classpath scopes it is visible in.
SCOPE_AVAILABILITY: dict[str, tuple[Scope, ...]] = {
    "compile": (Scope.COMPILE, Scope.TEST, Scope.RUNTIME),
    "provided": (Scope.COMPILE, Scope.TEST),
    "runtime": (Scope.TEST, Scope.RUNTIME),
    "test": (Scope.TEST,),
}

_PROP_RE = re.compile(r"\$\{([^}]+)\}")

# Dependency child elements with a dedicated Dependency field.
_KNOWN_FIELDS = frozenset(
    {"groupid", "artifactid", "version", "type", "classifier", "scope", "optional", "path"}
)


def parse_xml(content: str | bytes, source: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as exc:
        raise ManifestParseError(source, str(exc)) from exc


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix, if any."""
    return tag.rsplit("}", 1)[-1]


def select(root: ET.Element, path: str) -> list[ET.Element]:
    """Evaluate an absolute ``/a/b/c`` path by local names.

    Matches both namespaced and bare POMs.  ``*`` matches any child.
    """
    first, *rest = path.strip("/").split("/")
    if local_name(root.tag) != first:
        return []
    current = [root]
    for step in rest:
        current = [
            child
            for element in current
            for child in element
            if isinstance(child.tag, str) and (step == "*" or local_name(child.tag) == step)
        ]
    return current


def texts(root: ET.Element, path: str) -> list[str]:
    """Stripped, non-empty text of every element matching *path*."""
    return [el.text.strip() for el in select(root, path) if el.text and el.text.strip()]


def collect_properties(root: ET.Element) -> dict[str, str]:
    """``/project/properties/*`` as a name -> value mapping."""
    properties: dict[str, str] = {}
    for element in select(root, "/project/properties/*"):
        if element.text is not None:
            properties[local_name(element.tag).strip()] = element.text.strip()
    return properties


def substitute(value: str, properties: dict[str, str]) -> str:
    """Replace ``${name}`` tokens; unknown names are left verbatim."""

    def _replace(m: re.Match) -> str:
        return properties.get(m.group(1), m.group(0))

    return _PROP_RE.sub(_replace, value)


def dependency_fields(element: ET.Element, properties: dict[str, str]) -> dict[str, str]:
    """Child elements of a ``<dependency>`` as lower-cased key -> substituted text."""
    fields: dict[str, str] = {}
    for entry in element:
        if not isinstance(entry.tag, str):
            continue
        value = (entry.text or "").strip()
        fields[local_name(entry.tag).lower()] = substitute(value, properties)
    return fields


def selected(fields: dict[str, str], scope: Scope) -> bool:
    """Whether a dependency with these fields belongs on the *scope* classpath."""
    if fields.get("optional") == "true":
        return False
    dep_scope = fields.get("scope") or DEFAULT_SCOPE
    if dep_scope not in SCOPE_AVAILABILITY:
        raise UnknownScopeError(dep_scope, SCOPE_AVAILABILITY.keys())
    return scope in SCOPE_AVAILABILITY[dep_scope]


def to_dependency(fields: dict[str, str], source: str) -> Dependency:
    for key in ("groupid", "artifactid", "version"):
        if not fields.get(key):
            raise ManifestParseError(
                source, f"dependency {fields.get('artifactid')!r} has no <{key}>"
            )
    return Dependency(
        group_id=fields["groupid"],
        artifact_id=fields["artifactid"],
        version=fields["version"],
        type=fields.get("type") or "jar",
        classifier=fields.get("classifier") or None,
        scope=fields.get("scope") or None,
        optional=fields.get("optional") == "true",
        path=fields.get("path") or None,
        extra={k: v for k, v in fields.items() if k not in _KNOWN_FIELDS},
    )


def parse_pom_dependencies(
    content: str | bytes, scope: Scope, source: str
) -> list[Dependency]:
    """Parse ``/project/dependencies/dependency`` entries visible in *scope*."""
    root = parse_xml(content, source)
    properties = collect_properties(root)
    dependencies: list[Dependency] = []
    for element in select(root, "/project/dependencies/dependency"):
        fields = dependency_fields(element, properties)
        if selected(fields, scope):
            dependencies.append(to_dependency(fields, source))
    return dependencies


def legacy_visible(dependency: Dependency, scope: Scope) -> bool:
    fields = {"scope": dependency.scope or "", "optional": str(dependency.optional).lower()}
    return selected(fields, scope)
