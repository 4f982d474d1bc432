"""Registry-backed dependency closure service for peerbump.

Answers "what would the dependency tree look like if this package were
pinned to that version?" for one platform, by walking ``requires_dist``
metadata breadth first through the shared
:class:`~peerbump.core.package_index.PackageIndex`.

The walk is deliberately simple:

- Environment markers are evaluated for the platform's Python version;
  requirements that only apply to an *extra* are skipped.
- Each newly seen name gets the highest stable version that satisfies
  the requirement which introduced it and is compatible with the
  platform.
- The first resolution of a name wins. There is no backtracking, so a
  later, stricter requirement on the same name does not revise it.
- A requirement no version can satisfy is logged and skipped.

Typical usage::

    async with HTTPClient() as http:
        index   = PackageIndex(http, config.registries)
        service = IndexClosureService(index)
        deps    = await service.closure(
            "/repo", "app/requirements.txt", Platform.parse("py3.11"),
            Dependency("flask", "3.0.0"),
        )
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from packaging.markers import Marker
from packaging.requirements import InvalidRequirement, Requirement as PkgRequirement

from peerbump.core.package_index import PackageIndex
from peerbump.models.candidate import CandidateSet, CandidateVersion
from peerbump.models.dependency import Dependency, DependencyKey, DependencyType
from peerbump.models.platform import Platform
from peerbump.utils.logger import get_logger
from peerbump.utils.version_utils import parse_version

logger = get_logger("closure")

# Public API
__all__ = ["IndexClosureService", "marker_environment"]


def marker_environment(platform: Platform) -> Dict[str, str]:
    """Marker variables overridden for *platform*.

    Only the interpreter version is known; the rest of the environment
    falls back to the running interpreter's values. Non-Python runtimes
    override nothing.

    Example::

        >>> marker_environment(Platform.parse("py3.11"))
        {'python_version': '3.11', 'python_full_version': '3.11.0'}
    """
    python_version = platform.python_version
    if python_version is None:
        return {}

    release = list(platform.version[:3])
    while len(release) < 3:
        release.append(0)
    return {
        "python_version": ".".join(str(part) for part in platform.version[:2]),
        "python_full_version": ".".join(str(part) for part in release),
    }


def _applies(marker: Optional[Marker], environment: Dict[str, str]) -> bool:
    """Evaluate *marker*; ``extra`` is unset so extra-only entries fail."""
    if marker is None:
        return True
    return marker.evaluate(environment)


class IndexClosureService:
    """Compute dependency closures from registry metadata.

    Args:
        index: Shared package index used for candidates, compatibility
            and ``requires_dist`` lookups.
    """

    def __init__(self, index: PackageIndex) -> None:
        self.index = index

    async def closure(
        self,
        workspace_path: str,
        project_path: str,
        platform: Platform,
        pinned: Dependency,
    ) -> List[Dependency]:
        """Return *pinned* and everything it pulls in on *platform*.

        *workspace_path* and *project_path* only identify the request in
        logs; registry metadata does not depend on them.

        Raises:
            RegistryError: A package in the tree is on no registry.
            DataIntegrityError: The pinned version is on no registry.
        """
        logger.debug(
            "Closure of %s on %s (workspace %s, project %s)",
            pinned,
            platform,
            workspace_path,
            project_path,
        )
        environment = marker_environment(platform)

        pinned_candidates = await self.index.list_candidates(pinned.name)
        pinned_version = parse_version(pinned.version)
        root = CandidateSet(pinned.name, pinned_version, pinned_candidates).get(
            pinned_version
        )

        resolved: Dict[DependencyKey, Dependency] = {pinned.key: pinned}
        queue: Deque[Tuple[str, CandidateVersion]] = deque([(pinned.name, root)])

        while queue:
            name, candidate = queue.popleft()
            requires = await self.index.get_requires_dist(
                candidate.registries[0], name, candidate.text
            )

            for spec in requires:
                try:
                    req = PkgRequirement(spec)
                except InvalidRequirement:
                    logger.warning("Ignoring invalid requirement %r of %s", spec, name)
                    continue

                if not _applies(req.marker, environment):
                    continue

                key = DependencyKey(req.name)
                if key in resolved:
                    continue

                chosen = await self._pick_version(req, platform)
                if chosen is None:
                    logger.warning(
                        "No version of %s satisfies %r (required by %s %s) on %s",
                        req.name,
                        str(req.specifier) or "any",
                        name,
                        candidate.text,
                        platform,
                    )
                    continue

                resolved[key] = Dependency(req.name, chosen.text, DependencyType.UNKNOWN)
                queue.append((req.name, chosen))

        logger.debug("Closure of %s on %s: %d package(s)", pinned, platform, len(resolved))
        return list(resolved.values())

    async def _pick_version(
        self,
        req: PkgRequirement,
        platform: Platform,
    ) -> Optional[CandidateVersion]:
        """Highest stable, compatible version satisfying *req*, if any."""
        candidates = await self.index.list_candidates(req.name)
        matching = sorted(
            (
                c
                for c in candidates
                if not c.version.is_prerelease and req.specifier.contains(c.version)
            ),
            key=lambda c: c.version,
            reverse=True,
        )

        for candidate in matching:
            if await self.index.is_compatible(
                candidate.registries[0], req.name, candidate.text, [platform]
            ):
                return candidate
        return None
