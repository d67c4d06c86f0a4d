"""Manifest dialects — auto-registered on import."""

from jvmdeps.dialects import (
    legacy_v1,  # noqa: F401
    legacy_v2,  # noqa: F401
    native,  # noqa: F401
)
