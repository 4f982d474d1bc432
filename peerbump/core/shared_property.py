"""Shared build-variable detection for peerbump.

A dependency whose version is written as a build variable
(``requests==${HTTP_STACK_VERSION}``) may share that variable with
unrelated dependencies elsewhere in the workspace. Bumping the variable
for one would silently move the others, so the analysis flags it.
"""

from __future__ import annotations

from typing import Iterable, Set

from peerbump.models.dependency import DependencyKey
from peerbump.models.workspace import Project, TargetDependency, WorkspaceSnapshot
from peerbump.utils.logger import get_logger

logger = get_logger("shared_property")

__all__ = ["uses_shared_variable"]


def _target_variables(
    projects: Iterable[Project],
    key: DependencyKey,
) -> Set[str]:
    """Variables bound to direct declarations of *key* in *projects*."""
    return {
        dep.variable.name
        for project in projects
        for dep in project.dependencies
        if not dep.is_transitive and dep.key == key and dep.variable is not None
    }


def _other_variables(
    projects: Iterable[Project],
    key: DependencyKey,
) -> Set[str]:
    """Variables bound to direct declarations of anything other than *key*."""
    return {
        dep.variable.name
        for project in projects
        for dep in project.dependencies
        if not dep.is_transitive and dep.key != key and dep.variable is not None
    }


def uses_shared_variable(
    snapshot: WorkspaceSnapshot,
    target: TargetDependency,
    affected_projects: Iterable[Project],
) -> bool:
    """Return True if the target's version variable also feeds another dependency.

    Target bindings come from the affected projects only; bindings of
    other dependencies are collected across the whole workspace. Variable
    names match exactly (case-sensitive).

    Args:
        snapshot: Full workspace scan.
        target: Dependency under consideration.
        affected_projects: Projects referencing the target.

    Returns:
        ``True`` when at least one variable is shared.
    """
    key = target.key
    target_variables = _target_variables(affected_projects, key)
    if not target_variables:
        return False

    shared = target_variables & _other_variables(snapshot.projects, key)
    if shared:
        logger.info(
            "Version of %s comes from shared variable(s): %s",
            target.name,
            ", ".join(sorted(shared)),
        )
    return bool(shared)
