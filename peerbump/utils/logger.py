"""
Diagnostic logging for peerbump.

Modules obtain loggers with ``get_logger("resolver")`` and stay silent
(a :class:`logging.NullHandler`) until :func:`setup_logging` attaches a
stderr handler. The CLI does that from the ``-v`` count; an application
embedding the analyzer can do it or rely on its own root configuration.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Dict, Optional

from peerbump.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "peerbump"

_setup_lock = threading.Lock()


def _stream_supports_color(stream: IO[str]) -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return bool(stream.isatty())
    except (AttributeError, OSError, ValueError):
        return False


class ColoredFormatter(logging.Formatter):
    """Formatter that paints the level name when writing to a terminal.

    Args:
        fmt: ``logging`` format string.
        datefmt: ``asctime`` format.
        stream: Stream the owning handler writes to; colour is only used
            when it is a TTY and neither ``NO_COLOR`` nor ``CI`` is set.
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        stream: Optional[IO[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.stream = stream

    def use_color(self) -> bool:
        return self.stream is not None and _stream_supports_color(self.stream)

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color is None or not self.use_color():
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Records are shared between handlers.
            record.levelname = plain


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Route ``peerbump.*`` records to ``stream`` (stderr by default).

    Calling it again replaces the previous handler, so the last call wins.

    Args:
        level: Minimum level emitted.
        verbose: Include timestamp and logger name in each line.
        stream: Destination; ``sys.stderr`` when omitted.
    """
    target = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(target)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            stream=target,
        )
    )

    with _setup_lock:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.handlers[:] = [handler]
        root.setLevel(level)
        root.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``peerbump`` namespace.

    ``name`` may be short (``"closure"``) or already qualified
    (``"peerbump.core.closure"``); None returns the package root logger.
    """
    if not name or name == ROOT_LOGGER_NAME:
        qualified = ROOT_LOGGER_NAME
    elif name.startswith(ROOT_LOGGER_NAME + "."):
        qualified = name
    else:
        qualified = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(qualified)
    if not logger.handlers and not (logger.parent and logger.parent.handlers):
        logger.addHandler(logging.NullHandler())
    return logger
