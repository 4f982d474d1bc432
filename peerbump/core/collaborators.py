"""Boundary contracts of the services the analysis engine consults.

The engine never talks to a registry or a build system directly; it is
handed objects satisfying these protocols. :mod:`peerbump.core.package_index`
and :mod:`peerbump.core.closure` provide registry-backed implementations,
and tests substitute small in-memory fakes.

All methods may block on network or filesystem I/O and are therefore
``async``. The engine awaits them strictly one at a time.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from peerbump.models.dependency import Dependency
from peerbump.models.platform import Platform
from peerbump.models.candidate import CandidateVersion


class VersionCandidateSource(Protocol):
    """Enumerates known versions of a package and where they are hosted."""

    async def list_candidates(self, name: str) -> Sequence[CandidateVersion]:
        """Return every known version of *name* with its hosting registries."""
        ...


class CompatibilityOracle(Protocol):
    """Judges whether a package version can be consumed by target platforms."""

    async def is_compatible(
        self,
        registry: str,
        name: str,
        version: str,
        platforms: Sequence[Platform],
    ) -> bool:
        """Return True if *name* *version* from *registry* suits every platform."""
        ...


class DependencyClosureService(Protocol):
    """Computes the full dependency set under a hypothetical pinned package."""

    async def closure(
        self,
        workspace_path: str,
        project_path: str,
        platform: Platform,
        pinned: Dependency,
    ) -> Sequence[Dependency]:
        """Return direct and transitive dependencies for *platform*."""
        ...
