"""JSON input/output for peerbump.

Reads the two analysis inputs (workspace snapshot and target dependency
description) and writes one result file per analyzed dependency.

Formatting is controlled by a :class:`SerializerOptions` value that the
caller constructs and passes in; nothing here keeps process-wide state.

Enumerations are written by member name and version requirements by
their canonical specifier text (see
:class:`~peerbump.models.requirement.VersionRequirement`), so reading a
written file back reproduces identical values.

Typical usage::

    options  = SerializerOptions()
    snapshot = load_snapshot(Path("discovery.json"), options)
    target   = load_target(Path("dependency.json"), options)
    ...
    path = write_result(Path(".peerbump/analysis"), target.name, result, options)
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from peerbump.constants import ROLE_TARGET_DEPENDENCY, ROLE_WORKSPACE_SNAPSHOT
from peerbump.exceptions import MalformedInputError, MissingInputError
from peerbump.models.result import AnalysisResult
from peerbump.models.workspace import TargetDependency, WorkspaceSnapshot
from peerbump.utils.filesystem import PathLike, safe_read_file, safe_write_file, validate_path
from peerbump.utils.logger import get_logger

logger = get_logger("serialization")

__all__ = [
    "SerializerOptions",
    "dump_result",
    "load_result",
    "load_snapshot",
    "load_target",
    "result_path",
    "write_result",
]

T = TypeVar("T")


@dataclass(frozen=True)
class SerializerOptions:
    """How JSON documents are read and written.

    Attributes:
        indent: Indentation for written JSON; ``None`` writes one line.
        sort_keys: Sort object keys when writing.
        encoding: Text encoding of input files (output is always UTF-8).
    """

    indent: Optional[int] = 2
    sort_keys: bool = False
    encoding: str = "utf-8"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _read_document(path: Path, role: str, options: SerializerOptions) -> Any:
    """Read and decode a JSON input file.

    Raises:
        MissingInputError: The file does not exist.
        MalformedInputError: The file is empty or is not valid JSON.
    """
    if not path.exists():
        raise MissingInputError(role, file_path=str(path))

    text = safe_read_file(path, encoding=options.encoding)
    if not text.strip():
        raise MalformedInputError(f"{role} file is empty", role=role, file_path=str(path))

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(
            f"{role} file is not valid JSON: {exc.msg} at line {exc.lineno}",
            role=role,
            file_path=str(path),
        ) from exc

    if data is None:
        raise MalformedInputError(f"{role} file is empty", role=role, file_path=str(path))

    return data


def _load(
    path: PathLike,
    role: str,
    decoder: Callable[[Any], T],
    options: SerializerOptions,
) -> T:
    source = Path(path)
    data = _read_document(source, role, options)
    try:
        record = decoder(data)
    except ValueError as exc:
        raise MalformedInputError(
            f"Invalid {role} file: {exc}",
            role=role,
            file_path=str(source),
        ) from exc
    logger.debug("Loaded %s from %s", role, source)
    return record


def load_snapshot(path: PathLike, options: SerializerOptions) -> WorkspaceSnapshot:
    """Load the workspace snapshot produced by the workspace scanner."""
    return _load(path, ROLE_WORKSPACE_SNAPSHOT, WorkspaceSnapshot.from_json, options)


def load_target(path: PathLike, options: SerializerOptions) -> TargetDependency:
    """Load the description of the dependency to analyze."""
    return _load(path, ROLE_TARGET_DEPENDENCY, TargetDependency.from_json, options)


def load_result(text: str) -> AnalysisResult:
    """Decode a result document previously produced by :func:`dump_result`.

    Raises:
        ValueError: The text is not a valid result document.
    """
    return AnalysisResult.from_json(json.loads(text))


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def dump_result(result: AnalysisResult, options: SerializerOptions) -> str:
    """Encode *result* as JSON text."""
    return (
        json.dumps(
            result.to_json(),
            indent=options.indent,
            sort_keys=options.sort_keys,
        )
        + "\n"
    )


def result_path(directory: PathLike, dependency_name: str) -> Path:
    """Return the result file location for *dependency_name*.

    Raises:
        FileOperationError: The name would escape *directory*.
    """
    return validate_path(Path(directory) / f"{dependency_name}.json", base_dir=directory)


def write_result(
    directory: PathLike,
    dependency_name: str,
    result: AnalysisResult,
    options: SerializerOptions,
) -> Path:
    """Atomically write *result* to ``<directory>/<dependency_name>.json``.

    Returns:
        The path written.
    """
    path = result_path(directory, dependency_name)
    safe_write_file(path, dump_result(result, options))
    logger.info("Wrote analysis for %s to %s", dependency_name, path)
    return path
