"""
PEP 440 helpers built on ``packaging``.

Used to parse version text from inputs and registry metadata, and to label
the jump from the version in use to the resolved one for display.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import Optional

from packaging.version import InvalidVersion, Version, parse

# Release segment positions, in the order an upgrade is labelled.
_RELEASE_LABELS = ("major", "minor", "patch")


def parse_version(value: str) -> Version:
    """Parse version text, ignoring surrounding whitespace.

    Raises:
        InvalidVersion: ``value`` is not a PEP 440 version.
    """
    parsed = parse(value.strip())
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)
    return parsed


def try_parse_version(value: Optional[str]) -> Optional[Version]:
    if value is None:
        return None
    try:
        return parse_version(value)
    except InvalidVersion:
        return None


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Label the move from ``current_version`` to ``target_version``.

    Returns:
        ``"new"`` when nothing is installed, ``"same"``, ``"downgrade"``,
        the first differing release segment (``"major"``, ``"minor"``,
        ``"patch"``), ``"update"`` for changes past the third segment or in
        pre/post/dev tags, and ``"unknown"`` when either side is unusable.

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type("1.2.3", "1.2.3")
        'same'
    """
    if target_version is None:
        return "unknown"
    if current_version is None:
        return "new"

    current = try_parse_version(current_version)
    target = try_parse_version(target_version)
    if current is None or target is None:
        return "unknown"

    if target == current:
        return "same"
    if target < current:
        return "downgrade"

    segments = zip_longest(current.release, target.release, fillvalue=0)
    for label, (old, new) in zip(_RELEASE_LABELS, segments):
        if old != new:
            return label
    return "update"
