"""
Candidate version models for peerbump.

A :class:`CandidateSet` is what the resolver sees of a package's
versions: every known version with the registries hosting it, including
the current version so that its registry can be looked up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from packaging.version import InvalidVersion, Version

from peerbump.exceptions import DataIntegrityError
from peerbump.models.workspace import TargetDependency
from peerbump.utils.version_utils import parse_version


@dataclass(frozen=True)
class CandidateVersion:
    """A version of a package together with the registries exposing it.

    Attributes:
        text: Version text exactly as the registry reports it.
        version: Parsed version used for ordering and comparison.
        registries: Registries hosting this version, in preference order.
    """

    text: str
    version: Version
    registries: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str, registries: Iterable[str] = ()) -> "CandidateVersion":
        """Create a candidate from version text.

        Raises:
            DataIntegrityError: *text* is not a valid version.
        """
        try:
            version = parse_version(text)
        except InvalidVersion as exc:
            raise DataIntegrityError(
                f"Candidate version {text!r} is not a valid version",
                version=text,
            ) from exc
        return cls(text=text, version=version, registries=tuple(registries))

    def __str__(self) -> str:
        return self.text


class CandidateSet:
    """Known versions of one package, indexed by parsed version.

    Duplicate entries for the same version are merged; their registries
    are concatenated without repeats in first-seen order, and the first
    version text wins.

    Args:
        package_name: Package the versions belong to.
        current: Parsed current version of the package.
        candidates: Versions reported by the candidate source.

    Raises:
        DataIntegrityError: A candidate has no registry.
    """

    def __init__(
        self,
        package_name: str,
        current: Version,
        candidates: Iterable[CandidateVersion],
    ) -> None:
        self.package_name = package_name
        self.current = current

        self._entries: Dict[Version, CandidateVersion] = {}
        for candidate in candidates:
            if not candidate.registries:
                raise DataIntegrityError(
                    f"Candidate {package_name} {candidate.text} has no registry",
                    package_name=package_name,
                    version=candidate.text,
                )
            known = self._entries.get(candidate.version)
            if known is None:
                self._entries[candidate.version] = candidate
                continue
            merged = known.registries + tuple(
                r for r in candidate.registries if r not in known.registries
            )
            self._entries[candidate.version] = CandidateVersion(
                text=known.text, version=known.version, registries=merged
            )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, version: object) -> bool:
        return version in self._entries

    def get(self, version: Version) -> CandidateVersion:
        """Return the candidate for *version*.

        Raises:
            DataIntegrityError: *version* is not known to any registry.
        """
        candidate = self._entries.get(version)
        if candidate is None:
            raise DataIntegrityError(
                f"No registry hosts {self.package_name} {version}",
                package_name=self.package_name,
                version=str(version),
            )
        return candidate

    def update_candidates(self, target: TargetDependency) -> List[CandidateVersion]:
        """Return the versions eligible as update targets, unordered.

        The current version is excluded, as are versions matching any of
        the target's ignored requirements and, for vulnerability-motivated
        updates, versions matching any vulnerable requirement.
        """
        result: List[CandidateVersion] = []
        for version, candidate in self._entries.items():
            if version == self.current:
                continue
            if any(req.is_satisfied_by(version) for req in target.ignored_versions):
                continue
            if target.is_vulnerable and any(
                req.is_satisfied_by(version) for req in target.vulnerable_versions
            ):
                continue
            result.append(candidate)
        return result
