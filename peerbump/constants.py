"""
Centralized constants for peerbump.

This module defines immutable configuration values used across peerbump,
including registry endpoints, network settings, output locations, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "peerbump/{version}"

# ---------------------------------------------------------------------------
# Registry endpoints
# ---------------------------------------------------------------------------

#: Registries consulted when the configuration names none.
DEFAULT_REGISTRIES: Final[Sequence[str]] = ("https://pypi.org/pypi",)

#: JSON metadata URL for a package, relative to a registry base URL.
REGISTRY_PACKAGE_URL: Final[str] = "{registry}/{package}/json"

#: JSON metadata URL for a single release, relative to a registry base URL.
REGISTRY_RELEASE_URL: Final[str] = "{registry}/{package}/{version}/json"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Analysis defaults
# ---------------------------------------------------------------------------

#: Directory (relative to the working directory) receiving result files.
DEFAULT_ANALYSIS_DIRECTORY: Final[str] = ".peerbump/analysis"

#: Historical behaviour: an incompatible baseline skips candidate checks.
DEFAULT_VERIFY_INCOMPATIBLE_BASELINE: Final[bool] = False

#: Runtime prefixes understood as CPython / Python interpreter targets.
PYTHON_RUNTIMES: Final[Sequence[str]] = ("py", "python", "cp")

# ---------------------------------------------------------------------------
# Input roles (used in error reporting)
# ---------------------------------------------------------------------------

ROLE_WORKSPACE_SNAPSHOT: Final[str] = "workspace snapshot"
ROLE_TARGET_DEPENDENCY: Final[str] = "target dependency"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed size (in bytes) of an input file.
MAX_FILE_SIZE: Final[int] = 50 * 1024 * 1024  # 50 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
