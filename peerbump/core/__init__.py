"""
Core functionality exports for peerbump.

This module provides convenient access to the core subsystems of peerbump.
Importing from here keeps user-facing imports clean and stable:

    from peerbump.core import Analyzer, PackageIndex

The resolver, shared-variable detector and peer calculator only talk to
the collaborator protocols; :class:`PackageIndex` and
:class:`IndexClosureService` are the registry-backed implementations.
"""

from __future__ import annotations

from peerbump.core.analyzer import AnalysisReport, Analyzer
from peerbump.core.closure import IndexClosureService
from peerbump.core.collaborators import (
    CompatibilityOracle,
    DependencyClosureService,
    VersionCandidateSource,
)
from peerbump.core.package_index import PackageIndex, RegistryPackage
from peerbump.core.peer_impact import PeerImpactCalculator, merge_closures
from peerbump.core.resolver import VersionResolver
from peerbump.core.shared_property import uses_shared_variable

__all__ = [
    "AnalysisReport",
    "Analyzer",
    "CompatibilityOracle",
    "DependencyClosureService",
    "IndexClosureService",
    "PackageIndex",
    "PeerImpactCalculator",
    "RegistryPackage",
    "VersionCandidateSource",
    "VersionResolver",
    "merge_closures",
    "uses_shared_variable",
]
