"""
Analysis result models for peerbump.

One :class:`AnalysisResult` is produced per analyzed dependency and
written as JSON to the analysis directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from peerbump.models.dependency import Dependency, DependencyType


@dataclass(frozen=True)
class PeerDependency:
    """A directly referenced dependency whose version changes with the update.

    Attributes:
        name: Dependency name as reported by the closure.
        version: New version text.
        category: Dependency category.
    """

    name: str
    version: str
    category: DependencyType = DependencyType.UNKNOWN

    @classmethod
    def from_dependency(cls, dependency: Dependency) -> "PeerDependency":
        return cls(
            name=dependency.name,
            version=dependency.version,
            category=dependency.category,
        )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "PeerDependency":
        if not isinstance(data, Mapping):
            raise ValueError("updated dependency must be an object")
        name = data.get("name")
        version = data.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            raise ValueError("updated dependency needs string 'name' and 'version'")
        return cls(
            name=name,
            version=version,
            category=DependencyType.from_name(data.get("category")),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "category": self.category.name,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analyzing one target dependency.

    Attributes:
        updated_version: Resolved version text; equals the current
            version text when no update was found.
        can_update: Whether a version was resolved.
        shared_variable_version: Whether the target's version comes from
            a build variable shared with another dependency.
        updated_dependencies: Peers whose versions change, in order.
    """

    updated_version: str
    can_update: bool
    shared_variable_version: bool
    updated_dependencies: Tuple[PeerDependency, ...] = ()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        """Build a result from its JSON mapping.

        Raises:
            ValueError: The mapping is structurally invalid.
        """
        if not isinstance(data, Mapping):
            raise ValueError("analysis result must be an object")

        updated_version = data.get("updated_version")
        can_update = data.get("can_update")
        shared = data.get("shared_variable_version")
        peers = data.get("updated_dependencies", [])

        if not isinstance(updated_version, str):
            raise ValueError("'updated_version' must be a string")
        if not isinstance(can_update, bool) or not isinstance(shared, bool):
            raise ValueError("'can_update' and 'shared_variable_version' must be booleans")
        if not isinstance(peers, list):
            raise ValueError("'updated_dependencies' must be a list")

        return cls(
            updated_version=updated_version,
            can_update=can_update,
            shared_variable_version=shared,
            updated_dependencies=tuple(PeerDependency.from_json(p) for p in peers),
        )

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "updated_version": self.updated_version,
            "can_update": self.can_update,
            "shared_variable_version": self.shared_variable_version,
            "updated_dependencies": [p.to_json() for p in self.updated_dependencies],
        }
