"""jvmdeps — resolve JVM library dependencies into a cached classpath."""

__version__ = "0.1.0"

from jvmdeps.models import Dependency, Dialect, Scope
from jvmdeps.resolver import DependencyResolver, build_classpath, resolve_dependency_paths

__all__ = [
    "Dependency",
    "DependencyResolver",
    "Dialect",
    "Scope",
    "build_classpath",
    "resolve_dependency_paths",
]
