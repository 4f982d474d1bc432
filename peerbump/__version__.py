"""
peerbump version information.

Single source of truth for the package version. peerbump follows
Semantic Versioning: https://semver.org/
"""

from __future__ import annotations

__version__ = "0.1.0"

#: Human-readable version (for CLI and User-Agent headers).
VERSION_STRING = f"peerbump {__version__}"
