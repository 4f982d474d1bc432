"""
Dependency data models for peerbump.

Defines the case-insensitive dependency identity, the dependency
category enum, and the records describing what a project declares and
what a dependency closure contains.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from peerbump.models.requirement import VersionRequirement


class DependencyKey:
    """Case-insensitive identity of a dependency name.

    Every comparison between dependency names in peerbump goes through
    this type. The original spelling is kept for display.

    Example::

        >>> DependencyKey("Requests") == DependencyKey("requests")
        True
    """

    __slots__ = ("name", "_folded")

    def __init__(self, name: str) -> None:
        self.name = name
        self._folded = name.casefold()

    @property
    def folded(self) -> str:
        """Casefolded form used for equality, hashing and ordering."""
        return self._folded

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyKey):
            return NotImplemented
        return self._folded == other._folded

    def __hash__(self) -> int:
        return hash(self._folded)

    def __lt__(self, other: "DependencyKey") -> bool:
        return self._folded < other._folded

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"DependencyKey({self.name!r})"


class DependencyType(Enum):
    """Category of a dependency declaration.

    Serialized by member name (``"REQUIREMENT"``), never by value.
    """

    UNKNOWN = 0
    REQUIREMENT = 1  # requirements*.txt entry
    CONSTRAINT = 2  # constraints file entry
    PROJECT = 3  # [project] dependencies in pyproject.toml
    OPTIONAL = 4  # optional-dependencies / extras
    BUILD = 5  # build-system requires
    DEVELOPMENT = 6  # dev / test groups

    @classmethod
    def from_name(cls, name: Any) -> "DependencyType":
        """Decode a member name; missing names map to ``UNKNOWN``.

        Raises:
            ValueError: *name* is not a string or not a member name.
        """
        if name is None:
            return cls.UNKNOWN
        if not isinstance(name, str):
            raise ValueError(f"Dependency category must be a string, got {type(name).__name__}")
        if not name.strip():
            return cls.UNKNOWN
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown dependency category: {name!r}") from None


@dataclass(frozen=True)
class VariableBinding:
    """Build variable supplying a declaration's version.

    Variable names are build-system identifiers and compare
    case-sensitively.
    """

    name: str


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


@dataclass(frozen=True)
class DependencyDeclaration:
    """One dependency entry declared by (or resolved into) a project.

    Attributes:
        name: Dependency name as written.
        requirement: Version requirement at the declaration site.
        is_transitive: ``True`` when pulled in indirectly.
        category: Declaration category.
        variable: Build variable supplying the version, if any.
    """

    name: str
    requirement: VersionRequirement = field(default_factory=VersionRequirement.any)
    is_transitive: bool = False
    category: DependencyType = DependencyType.UNKNOWN
    variable: Optional[VariableBinding] = None

    @property
    def key(self) -> DependencyKey:
        return DependencyKey(self.name)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DependencyDeclaration":
        """Build a declaration from its JSON mapping.

        Raises:
            ValueError: A field is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise ValueError("dependency declaration must be an object")

        requirement = data.get("requirement") or ""
        if not isinstance(requirement, str):
            raise ValueError("'requirement' must be a string")

        is_transitive = data.get("is_transitive", False)
        if not isinstance(is_transitive, bool):
            raise ValueError("'is_transitive' must be a boolean")

        variable = data.get("variable")
        if variable is not None and not isinstance(variable, str):
            raise ValueError("'variable' must be a string")

        return cls(
            name=_require_str(data, "name"),
            requirement=VersionRequirement.parse(requirement),
            is_transitive=is_transitive,
            category=DependencyType.from_name(data.get("category")),
            variable=VariableBinding(variable) if variable else None,
        )

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        entry: Dict[str, Any] = {
            "name": self.name,
            "requirement": self.requirement.to_json(),
            "is_transitive": self.is_transitive,
            "category": self.category.name,
        }
        if self.variable is not None:
            entry["variable"] = self.variable.name
        return entry


@dataclass(frozen=True)
class Dependency:
    """A concrete package at a concrete version.

    Used both as the pinned package handed to the closure service and
    as each entry of the closure it returns.
    """

    name: str
    version: str
    category: DependencyType = DependencyType.UNKNOWN

    @property
    def key(self) -> DependencyKey:
        return DependencyKey(self.name)

    def __str__(self) -> str:
        return f"{self.name}=={self.version}"
