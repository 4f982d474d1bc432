"""
Workspace snapshot and target dependency models for peerbump.

Both are produced outside the engine (by the workspace scanner and the
update request) and are read-only once decoded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from packaging.version import Version

from peerbump.models.platform import Platform
from peerbump.models.requirement import VersionRequirement
from peerbump.models.dependency import DependencyDeclaration, DependencyKey
from peerbump.utils.version_utils import parse_version


def _list_field(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list")
    return value


@dataclass(frozen=True)
class Project:
    """One project of the workspace.

    Attributes:
        file_path: Project file path; identity within the workspace.
        target_platforms: Target platforms, in declaration order.
        dependencies: Declared and transitive dependencies, in order.
    """

    file_path: str
    target_platforms: Tuple[Platform, ...] = ()
    dependencies: Tuple[DependencyDeclaration, ...] = ()

    def references(self, key: DependencyKey) -> bool:
        """Return True if any declaration (transitive or not) names *key*."""
        return any(dep.key == key for dep in self.dependencies)

    @classmethod
    def from_json(
        cls,
        data: Mapping[str, Any],
        platform_cache: Optional[Dict[str, Platform]] = None,
    ) -> "Project":
        """Build a project from its JSON mapping.

        Args:
            data: Decoded project object.
            platform_cache: Raw identifier → parsed platform, shared across
                projects so each distinct string is parsed once.

        Raises:
            ValueError: The mapping is structurally invalid.
        """
        if not isinstance(data, Mapping):
            raise ValueError("project must be an object")

        file_path = data.get("file_path")
        if not isinstance(file_path, str) or not file_path:
            raise ValueError("project 'file_path' must be a non-empty string")

        cache = platform_cache if platform_cache is not None else {}
        platforms: List[Platform] = []
        for raw in _list_field(data, "target_platforms"):
            if not isinstance(raw, str):
                raise ValueError("'target_platforms' entries must be strings")
            if raw not in cache:
                cache[raw] = Platform.parse(raw)
            if cache[raw] not in platforms:
                platforms.append(cache[raw])

        return cls(
            file_path=file_path,
            target_platforms=tuple(platforms),
            dependencies=tuple(
                DependencyDeclaration.from_json(dep)
                for dep in _list_field(data, "dependencies")
            ),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "target_platforms": [str(p) for p in self.target_platforms],
            "dependencies": [dep.to_json() for dep in self.dependencies],
        }


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Structural scan of a workspace.

    Attributes:
        file_path: Workspace path relative to the repository root.
        projects: Projects in scan order.
    """

    file_path: str = ""
    projects: Tuple[Project, ...] = ()

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "WorkspaceSnapshot":
        """Build a snapshot from its JSON mapping.

        Raises:
            ValueError: The mapping is structurally invalid.
        """
        if not isinstance(data, Mapping):
            raise ValueError("workspace snapshot must be an object")
        if "projects" not in data:
            raise ValueError("workspace snapshot has no 'projects'")

        file_path = data.get("file_path") or ""
        if not isinstance(file_path, str):
            raise ValueError("'file_path' must be a string")

        platform_cache: Dict[str, Platform] = {}
        return cls(
            file_path=file_path,
            projects=tuple(
                Project.from_json(project, platform_cache)
                for project in _list_field(data, "projects")
            ),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "projects": [project.to_json() for project in self.projects],
        }


@dataclass(frozen=True)
class TargetDependency:
    """The dependency whose update is being evaluated.

    Attributes:
        name: Dependency name; identity is case-insensitive.
        version: Current version text, as given.
        is_vulnerable: ``True`` when the update is security-motivated.
        ignored_versions: Requirements whose matching versions are never
            proposed.
        vulnerable_versions: Requirements describing affected versions;
            applied only when *is_vulnerable* is set.
    """

    name: str
    version: str
    is_vulnerable: bool = False
    ignored_versions: Tuple[VersionRequirement, ...] = field(default_factory=tuple)
    vulnerable_versions: Tuple[VersionRequirement, ...] = field(default_factory=tuple)

    @property
    def key(self) -> DependencyKey:
        return DependencyKey(self.name)

    @property
    def current_version(self) -> Version:
        """Parsed current version."""
        return parse_version(self.version)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TargetDependency":
        """Build a target description from its JSON mapping.

        Raises:
            ValueError: A field is missing, has the wrong type, or the
                current version cannot be parsed.
        """
        if not isinstance(data, Mapping):
            raise ValueError("target dependency must be an object")

        name = data.get("name")
        version = data.get("version")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("'name' must be a non-empty string")
        if not isinstance(version, str) or not version.strip():
            raise ValueError("'version' must be a non-empty string")
        parse_version(version)

        is_vulnerable = data.get("is_vulnerable", False)
        if not isinstance(is_vulnerable, bool):
            raise ValueError("'is_vulnerable' must be a boolean")

        return cls(
            name=name,
            version=version,
            is_vulnerable=is_vulnerable,
            ignored_versions=_requirements(data, "ignored_versions"),
            vulnerable_versions=_requirements(data, "vulnerable_versions"),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "is_vulnerable": self.is_vulnerable,
            "ignored_versions": [r.to_json() for r in self.ignored_versions],
            "vulnerable_versions": [r.to_json() for r in self.vulnerable_versions],
        }


def _requirements(data: Mapping[str, Any], key: str) -> Tuple[VersionRequirement, ...]:
    result: List[VersionRequirement] = []
    for text in _list_field(data, key):
        if not isinstance(text, str):
            raise ValueError(f"'{key}' entries must be strings")
        result.append(VersionRequirement.parse(text))
    return tuple(result)
