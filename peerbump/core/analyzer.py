"""Single-dependency update analysis for peerbump.

Orchestrates one analysis pass:

1. Load the workspace snapshot and the target dependency description.
2. Find the projects referencing the target and their distinct platforms.
3. Detect whether the target's version comes from a shared variable.
4. Resolve the version the target should move to.
5. When a version was found, compute the peers that move with it.
6. Write ``<analysis directory>/<dependency name>.json``.

Nothing is caught here: any fault after loading aborts the pass and
propagates to the caller, which may simply run it again.

Typical usage::

    analyzer = Analyzer(index, index, IndexClosureService(index), SerializerOptions())
    report = await analyzer.run(
        Path("."), Path("discovery.json"), Path("dependency.json"),
        Path(".peerbump/analysis"),
    )
    print(report.result.updated_version)
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from dataclasses import dataclass
from typing import Iterable, List, Optional

from peerbump.constants import DEFAULT_VERIFY_INCOMPATIBLE_BASELINE
from peerbump.core.collaborators import (
    CompatibilityOracle,
    DependencyClosureService,
    VersionCandidateSource,
)
from peerbump.core.peer_impact import PeerImpactCalculator
from peerbump.core.resolver import VersionResolver
from peerbump.core.shared_property import uses_shared_variable
from peerbump.models.dependency import DependencyKey
from peerbump.models.platform import Platform
from peerbump.models.result import AnalysisResult, PeerDependency
from peerbump.models.workspace import Project, TargetDependency, WorkspaceSnapshot
from peerbump.serialization import (
    SerializerOptions,
    load_snapshot,
    load_target,
    write_result,
)
from peerbump.utils.filesystem import PathLike
from peerbump.utils.logger import get_logger

logger = get_logger("analyzer")

__all__ = [
    "AnalysisReport",
    "Analyzer",
    "affected_platforms",
    "affected_projects",
]


def affected_projects(
    snapshot: WorkspaceSnapshot,
    key: DependencyKey,
) -> List[Project]:
    """Projects declaring *key*, directly or transitively, in snapshot order."""
    return [project for project in snapshot.projects if project.references(key)]


def affected_platforms(projects: Iterable[Project]) -> List[Platform]:
    """Distinct target platforms of *projects*, in first-seen order."""
    seen: List[Platform] = []
    for project in projects:
        for platform in project.target_platforms:
            if platform not in seen:
                seen.append(platform)
    return seen


@dataclass(frozen=True)
class AnalysisReport:
    """What :meth:`Analyzer.run` produced.

    Attributes:
        target: The dependency that was analyzed.
        result: The analysis outcome.
        output_path: Where the result file was written.
    """

    target: TargetDependency
    result: AnalysisResult
    output_path: Path


class Analyzer:
    """Run the update analysis for one target dependency.

    Args:
        source: Enumerates candidate versions and their registries.
        oracle: Judges platform compatibility of a version.
        closure_service: Computes dependency closures per platform.
        options: JSON formatting used for inputs and the result file.
        verify_incompatible_baseline: Forwarded to
            :class:`~peerbump.core.resolver.VersionResolver`.
    """

    def __init__(
        self,
        source: VersionCandidateSource,
        oracle: CompatibilityOracle,
        closure_service: DependencyClosureService,
        options: SerializerOptions,
        *,
        verify_incompatible_baseline: bool = DEFAULT_VERIFY_INCOMPATIBLE_BASELINE,
    ) -> None:
        self.options = options
        self.resolver = VersionResolver(
            source,
            oracle,
            verify_incompatible_baseline=verify_incompatible_baseline,
        )
        self.peer_calculator = PeerImpactCalculator(closure_service)

    async def run(
        self,
        repo_root: PathLike,
        discovery_path: PathLike,
        dependency_path: PathLike,
        analysis_dir: PathLike,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AnalysisReport:
        """Load inputs, analyze, and write the result file.

        Raises:
            MissingInputError: An input file does not exist.
            MalformedInputError: An input file is empty or invalid.
            PeerbumpError: Any collaborator or data-integrity fault.
        """
        snapshot = load_snapshot(discovery_path, self.options)
        target = load_target(dependency_path, self.options)

        workspace_path = str(Path(repo_root) / snapshot.file_path)
        result = await self.analyze(snapshot, target, workspace_path, cancel_event)

        output_path = write_result(analysis_dir, target.name, result, self.options)
        return AnalysisReport(target=target, result=result, output_path=output_path)

    async def analyze(
        self,
        snapshot: WorkspaceSnapshot,
        target: TargetDependency,
        workspace_path: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AnalysisResult:
        """Compute the analysis result for *target* within *snapshot*.

        When no version is found, ``updated_version`` carries the current
        version text and the peer list is empty.
        """
        projects = affected_projects(snapshot, target.key)
        platforms = affected_platforms(projects)
        logger.info(
            "%s %s is referenced by %d project(s) on %d platform(s): %s",
            target.name,
            target.version,
            len(projects),
            len(platforms),
            ", ".join(str(p) for p in platforms) or "none",
        )

        shared = uses_shared_variable(snapshot, target, projects)
        logger.info("Shared version variable for %s: %s", target.name, shared)

        chosen = await self.resolver.find_updated_version(
            target,
            platforms,
            cancel_event,
        )

        peers: List[PeerDependency] = []
        updated_version = target.version
        if chosen is not None:
            # Registry spellings such as "v1.1" or "1.1-RC1" are emitted in PEP 440 form.
            updated_version = str(chosen.version)
            logger.info("Resolved %s %s -> %s", target.name, target.version, updated_version)
            peers = await self.peer_calculator.find_updated_peers(
                workspace_path,
                projects,
                platforms,
                target,
                updated_version,
            )
            logger.info("%d peer dependency update(s) for %s", len(peers), target.name)
        else:
            logger.info("No update found for %s", target.name)

        return AnalysisResult(
            updated_version=updated_version,
            can_update=chosen is not None,
            shared_variable_version=shared,
            updated_dependencies=tuple(peers),
        )
