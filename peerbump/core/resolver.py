"""Update version resolution for peerbump.

Picks the single version a target dependency should move to:

1. **Ordering**: security-motivated updates walk candidates ascending
   (the lowest acceptable version is the minimal fix); ordinary updates
   walk them descending (the highest acceptable version wins).
2. **Baseline check**: the current version is checked first. When it is
   already incompatible with the consuming platforms, the first ordered
   candidate is returned *without* a compatibility check. That historical
   short-circuit can be switched off with ``verify_incompatible_baseline``,
   in which case the normal walk runs instead.
3. **Walk**: candidates are checked one at a time and the first one the
   compatibility oracle accepts is returned.

Only the first registry hosting a version is consulted for its
compatibility, even when the version is mirrored elsewhere.

Typical usage::

    resolver = VersionResolver(source=index, oracle=index)
    candidate = await resolver.find_updated_version(target, platforms)
    if candidate is not None:
        print(candidate.text)
"""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional, Sequence

from peerbump.constants import DEFAULT_VERIFY_INCOMPATIBLE_BASELINE
from peerbump.core.collaborators import CompatibilityOracle, VersionCandidateSource
from peerbump.models.candidate import CandidateSet, CandidateVersion
from peerbump.models.platform import Platform
from peerbump.models.workspace import TargetDependency
from peerbump.utils.logger import get_logger

logger = get_logger("resolver")

__all__ = ["VersionResolver"]


def _is_cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


class VersionResolver:
    """Find the best update version for a target dependency.

    Args:
        source: Enumerates candidate versions and their registries.
        oracle: Judges platform compatibility of a version.
        verify_incompatible_baseline: When ``False`` (historical
            behaviour), an incompatible current version makes the resolver
            return the first ordered candidate unchecked. When ``True``,
            candidates are always checked.
    """

    def __init__(
        self,
        source: VersionCandidateSource,
        oracle: CompatibilityOracle,
        *,
        verify_incompatible_baseline: bool = DEFAULT_VERIFY_INCOMPATIBLE_BASELINE,
    ) -> None:
        self.source = source
        self.oracle = oracle
        self.verify_incompatible_baseline = verify_incompatible_baseline

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def find_updated_version(
        self,
        target: TargetDependency,
        platforms: Sequence[Platform],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Optional[CandidateVersion]:
        """Return the version *target* should move to, or ``None``.

        Args:
            target: Dependency under consideration.
            platforms: Distinct platforms of every affected project.
            cancel_event: Optional signal; once set, the search stops and
                reports no version.

        Returns:
            The chosen candidate, or ``None`` when no candidate is
            acceptable (or the search was cancelled).

        Raises:
            DataIntegrityError: A candidate has no registry, or the current
                version is unknown to every registry.
        """
        candidates = await self.source.list_candidates(target.name)
        candidate_set = CandidateSet(target.name, target.current_version, candidates)
        logger.debug(
            "%d known version(s) of %s",
            len(candidate_set),
            target.name,
        )

        ordered = self.order_candidates(
            candidate_set.update_candidates(target),
            ascending=target.is_vulnerable,
        )

        return await self.find_first_compatible(
            target,
            candidate_set,
            ordered,
            platforms,
            cancel_event,
        )

    @staticmethod
    def order_candidates(
        candidates: Iterable[CandidateVersion],
        *,
        ascending: bool,
    ) -> List[CandidateVersion]:
        """Sort candidates by version, ascending or descending."""
        return sorted(candidates, key=lambda c: c.version, reverse=not ascending)

    async def find_first_compatible(
        self,
        target: TargetDependency,
        candidate_set: CandidateSet,
        ordered: Sequence[CandidateVersion],
        platforms: Sequence[Platform],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Optional[CandidateVersion]:
        """Walk *ordered* and return the first acceptable candidate.

        See the module docstring for the baseline short-circuit.
        """
        if _is_cancelled(cancel_event):
            logger.info("Version search for %s cancelled", target.name)
            return None

        current = candidate_set.get(target.current_version)
        baseline_compatible = await self._check(target.name, current, platforms)

        if not baseline_compatible and not self.verify_incompatible_baseline:
            # Broken baseline: any candidate is worth proposing
            chosen = ordered[0] if ordered else None
            logger.info(
                "Current %s %s is incompatible; proposing %s unchecked",
                target.name,
                current.text,
                chosen.text if chosen else "nothing",
            )
            return chosen

        for candidate in ordered:
            if _is_cancelled(cancel_event):
                logger.info("Version search for %s cancelled", target.name)
                return None
            if await self._check(target.name, candidate, platforms):
                return candidate

        logger.info("No compatible version of %s found", target.name)
        return None

    # ------------------------------------------------------------------
    # Helpers (private)
    # ------------------------------------------------------------------

    async def _check(
        self,
        name: str,
        candidate: CandidateVersion,
        platforms: Sequence[Platform],
    ) -> bool:
        """Ask the oracle about *candidate* using its first registry only."""
        registry = candidate.registries[0]
        compatible = await self.oracle.is_compatible(
            registry,
            name,
            candidate.text,
            platforms,
        )
        logger.debug(
            "%s %s from %s: %s",
            name,
            candidate.text,
            registry,
            "compatible" if compatible else "incompatible",
        )
        return compatible
