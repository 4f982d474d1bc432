"""
Support code shared by the peerbump engine and CLI.

``console`` is for user-facing terminal output, ``logger`` for
diagnostics, ``filesystem`` for guarded reads and atomic writes, ``http``
for registry requests and ``version_utils`` for PEP 440 helpers.
"""

from __future__ import annotations

from peerbump.utils.logger import get_logger, setup_logging
from peerbump.utils.http import HTTPClient
from peerbump.utils.filesystem import safe_read_file, safe_write_file, validate_path
from peerbump.utils.version_utils import get_update_type, parse_version, try_parse_version
from peerbump.utils.console import (
    colorize_update_type,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

__all__ = [
    "HTTPClient",
    "colorize_update_type",
    "get_logger",
    "get_raw_console",
    "get_update_type",
    "parse_version",
    "print_error",
    "print_success",
    "print_table",
    "print_warning",
    "reconfigure_console",
    "safe_read_file",
    "safe_write_file",
    "setup_logging",
    "try_parse_version",
    "validate_path",
]
