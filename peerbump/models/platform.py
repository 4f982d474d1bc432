"""
Target platform model for peerbump.

Raw platform identifiers from the workspace scan (``py3.11``,
``cp311``, ``python3.12-linux``) are parsed once into :class:`Platform`
values; everything downstream keys on the structured form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from peerbump.constants import PYTHON_RUNTIMES

_PLATFORM_PATTERN = re.compile(
    r"^(?P<runtime>[A-Za-z]+?)"
    r"(?P<version>\d+(?:\.\d+)*)"
    r"(?:-(?P<variant>[A-Za-z0-9_.]+))?$"
)


@dataclass(frozen=True, order=True)
class Platform:
    """A runtime + version target, with an optional variant.

    Attributes:
        runtime: Lower-case runtime identifier, e.g. ``"py"``.
        version: Numeric version components, e.g. ``(3, 11)``.
        variant: Optional qualifier after ``-``, e.g. ``"linux"``.
    """

    runtime: str
    version: Tuple[int, ...]
    variant: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "Platform":
        """Parse a raw platform identifier.

        Dotted versions are taken literally (``py3.11`` → ``(3, 11)``).
        A compact digit run follows PEP 425 tag style: the first digit is
        the major, the rest the minor (``cp311`` → ``(3, 11)``).

        Raises:
            ValueError: *raw* is not a platform identifier.
        """
        match = _PLATFORM_PATTERN.match(raw.strip())
        if match is None:
            raise ValueError(f"Invalid platform identifier: {raw!r}")

        digits = match.group("version")
        if "." in digits:
            version = tuple(int(part) for part in digits.split("."))
        elif len(digits) > 1:
            version = (int(digits[0]), int(digits[1:]))
        else:
            version = (int(digits),)

        variant = match.group("variant")
        return cls(
            runtime=match.group("runtime").lower(),
            version=version,
            variant=variant.lower() if variant else None,
        )

    @property
    def is_python(self) -> bool:
        """True when the runtime names a Python interpreter."""
        return self.runtime in PYTHON_RUNTIMES

    @property
    def python_version(self) -> Optional[str]:
        """Dotted interpreter version (``"3.11"``), or ``None`` for other runtimes."""
        if not self.is_python:
            return None
        return ".".join(str(part) for part in self.version)

    def __str__(self) -> str:
        text = f"{self.runtime}{'.'.join(str(part) for part in self.version)}"
        if self.variant:
            text += f"-{self.variant}"
        return text
