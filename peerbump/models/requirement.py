"""
Version requirement model for peerbump.

A :class:`VersionRequirement` is the range/operator form of a version
constraint (``>=1.0,<2.0``), kept distinct from plain version numbers.
It has exactly one textual encoding: :meth:`VersionRequirement.parse`
decodes and ``str()`` encodes, and re-encoding decoded text is stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from packaging.version import InvalidVersion, Version
from packaging.specifiers import InvalidSpecifier, Specifier, SpecifierSet

from peerbump.utils.version_utils import parse_version


def _matches(specifier: Specifier, version: Version) -> bool:
    # PEP 440 keeps 1.0.5rc1 out of "<1.0.5"; as a version range it is below
    # the bound, which is what vulnerability and ignore ranges mean.
    if specifier.operator == "<":
        return version < parse_version(specifier.version)
    return specifier.contains(version, prereleases=True)


@dataclass(frozen=True)
class VersionRequirement:
    """A set of version specifiers a version may satisfy.

    Accepted input forms:

    - ``""``: any version
    - ``"1.2.3"``: bare version, shorthand for ``==1.2.3``
    - ``"2.*"``: bare wildcard, shorthand for ``==2.*``
    - ``">=1.0,<2.0"``: comma separated PEP 440 specifiers

    Attributes:
        specifiers: Parsed specifier set.
    """

    specifiers: SpecifierSet

    @classmethod
    def parse(cls, text: str) -> "VersionRequirement":
        """Decode requirement text.

        Raises:
            ValueError: The text is neither a version nor a specifier list.
        """
        stripped = text.strip()
        if not stripped:
            return cls(SpecifierSet())

        if stripped[0].isdigit():
            if stripped.endswith(".*"):
                stripped = f"=={stripped}"
            else:
                try:
                    parse_version(stripped)
                except InvalidVersion as exc:
                    raise ValueError(f"Invalid version requirement: {text!r}") from exc
                return cls(SpecifierSet(f"=={stripped}"))

        try:
            return cls(SpecifierSet(stripped))
        except InvalidSpecifier as exc:
            raise ValueError(f"Invalid version requirement: {text!r}") from exc

    @classmethod
    def any(cls) -> "VersionRequirement":
        """Return a requirement every version satisfies."""
        return cls(SpecifierSet())

    def is_satisfied_by(self, version: Union[str, Version]) -> bool:
        """Return True if *version* satisfies every specifier.

        Pre-releases are always considered, and an exclusive upper bound is
        a plain ordering test, so ``<1.0.5`` matches ``1.0.5rc1``.
        """
        parsed = version if isinstance(version, Version) else parse_version(version)
        return all(_matches(spec, parsed) for spec in self.specifiers)

    def to_json(self) -> str:
        """Return the canonical encoding."""
        return str(self)

    def __str__(self) -> str:
        return str(self.specifiers)

    def __repr__(self) -> str:
        return f"VersionRequirement({str(self)!r})"
