"""
Unified data model exports for peerbump.

Example:
    >>> from peerbump.models import DependencyKey, Platform, AnalysisResult
"""

from __future__ import annotations

from peerbump.models.platform import Platform
from peerbump.models.requirement import VersionRequirement
from peerbump.models.dependency import (
    Dependency,
    DependencyDeclaration,
    DependencyKey,
    DependencyType,
    VariableBinding,
)
from peerbump.models.workspace import Project, TargetDependency, WorkspaceSnapshot
from peerbump.models.candidate import CandidateSet, CandidateVersion
from peerbump.models.result import AnalysisResult, PeerDependency

__all__ = [
    "AnalysisResult",
    "CandidateSet",
    "CandidateVersion",
    "Dependency",
    "DependencyDeclaration",
    "DependencyKey",
    "DependencyType",
    "PeerDependency",
    "Platform",
    "Project",
    "TargetDependency",
    "VariableBinding",
    "VersionRequirement",
    "WorkspaceSnapshot",
]
