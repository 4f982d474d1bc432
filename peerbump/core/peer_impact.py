"""Peer dependency impact calculation for peerbump.

Given the version the target dependency will move to, work out which
dependencies the affected projects already reference directly will end
up at a different version.

The closure service answers "what would the whole dependency tree look
like with the target pinned?" for one platform at a time. This module:

1. Collects one closure per platform of the affected projects.
2. Reduces them into a single mapping keyed by case-insensitive name,
   keeping the highest version of each dependency. The reduction is
   associative and commutative, so platform order never matters.
3. Keeps only names that some affected project declares
   non-transitively in the original scan. New transitive dependencies
   and names the workspace never referenced are dropped.
"""

from __future__ import annotations

from typing import (
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Sequence,
    Tuple,
)

from packaging.version import InvalidVersion, Version

from peerbump.exceptions import DataIntegrityError
from peerbump.core.collaborators import DependencyClosureService
from peerbump.models.dependency import Dependency, DependencyKey, DependencyType
from peerbump.models.platform import Platform
from peerbump.models.result import PeerDependency
from peerbump.models.workspace import Project, TargetDependency
from peerbump.utils.logger import get_logger
from peerbump.utils.version_utils import parse_version

logger = get_logger("peer_impact")

__all__ = [
    "PeerImpactCalculator",
    "direct_dependency_keys",
    "merge_closures",
    "merge_dependency",
]


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------


def _precedence(dependency: Dependency) -> Tuple[Version, str, str, str]:
    """Total order used to pick between two entries for the same name."""
    try:
        version = parse_version(dependency.version)
    except InvalidVersion as exc:
        raise DataIntegrityError(
            f"Closure entry {dependency} has an invalid version",
            package_name=dependency.name,
            version=dependency.version,
        ) from exc
    return (version, dependency.version, dependency.name, dependency.category.name)


def merge_dependency(left: Dependency, right: Dependency) -> Dependency:
    """Return whichever of two same-named entries has the higher version.

    Ties on the parsed version fall back to version text, name spelling
    and category name, so the choice never depends on argument order.
    """
    return left if _precedence(left) >= _precedence(right) else right


def merge_closures(
    closures: Iterable[Iterable[Dependency]],
) -> Dict[DependencyKey, Dependency]:
    """Reduce several closures into one entry per dependency name.

    Example::

        >>> merged = merge_closures([
        ...     [Dependency("Bar", "1.0.0")],
        ...     [Dependency("bar", "1.2.0")],
        ... ])
        >>> merged[DependencyKey("BAR")].version
        '1.2.0'
    """
    merged: Dict[DependencyKey, Dependency] = {}
    for closure in closures:
        for dependency in closure:
            key = dependency.key
            known = merged.get(key)
            merged[key] = (
                dependency if known is None else merge_dependency(known, dependency)
            )
    return merged


def direct_dependency_keys(projects: Iterable[Project]) -> FrozenSet[DependencyKey]:
    """Names declared non-transitively by any of *projects*."""
    return frozenset(
        dep.key
        for project in projects
        for dep in project.dependencies
        if not dep.is_transitive
    )


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class PeerImpactCalculator:
    """Compute the peers that move when the target dependency is updated.

    Args:
        closure_service: Computes the dependency closure for one platform.
    """

    def __init__(self, closure_service: DependencyClosureService) -> None:
        self.closure_service = closure_service

    async def find_updated_peers(
        self,
        workspace_path: str,
        affected_projects: Sequence[Project],
        platforms: Sequence[Platform],
        target: TargetDependency,
        updated_version: str,
    ) -> List[PeerDependency]:
        """Return the directly referenced dependencies whose versions change.

        Args:
            workspace_path: Absolute workspace path handed to the closure
                service.
            affected_projects: Projects referencing the target.
            platforms: Distinct platforms of the affected projects.
            target: Dependency under consideration.
            updated_version: Version text the target moves to.

        Returns:
            Peer updates sorted by case-insensitive name.
        """
        if not affected_projects:
            logger.debug("No project references %s; no peers", target.name)
            return []

        # Any project works; it only provides build configuration context
        project_path = affected_projects[0].file_path
        pinned = Dependency(target.name, updated_version, DependencyType.UNKNOWN)

        per_platform = await self.collect_closures(
            workspace_path,
            project_path,
            platforms,
            pinned,
        )
        merged = merge_closures(per_platform.values())
        referenced = direct_dependency_keys(affected_projects)

        peers = [
            PeerDependency.from_dependency(merged[key])
            for key in sorted(merged)
            if key in referenced
        ]
        logger.info(
            "%d of %d closure entries are referenced peers",
            len(peers),
            len(merged),
        )
        return peers

    async def collect_closures(
        self,
        workspace_path: str,
        project_path: str,
        platforms: Sequence[Platform],
        pinned: Dependency,
    ) -> Mapping[Platform, Tuple[Dependency, ...]]:
        """Ask the closure service once per platform, sequentially."""
        result: Dict[Platform, Tuple[Dependency, ...]] = {}
        for platform in platforms:
            dependencies = await self.closure_service.closure(
                workspace_path,
                project_path,
                platform,
                pinned,
            )
            logger.debug(
                "Closure for %s on %s: %d dependencies",
                pinned,
                platform,
                len(dependencies),
            )
            result[platform] = tuple(dependencies)
        return result
