"""Settings file support for peerbump.

peerbump reads at most one TOML file, chosen in this order:

1. the path given by ``--config`` / ``PEERBUMP_CONFIG``
2. ``peerbump.toml`` in the working directory (``[peerbump]`` table)
3. ``pyproject.toml`` in the working directory, if it has ``[tool.peerbump]``

Options left out of the file keep their defaults, and command line flags
override the file.

Example (``peerbump.toml``)::

    [peerbump]
    registries = ["https://pypi.org/pypi", "https://mirror.example.com/pypi"]
    verify_incompatible_baseline = false
    analysis_directory = ".peerbump/analysis"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field

from peerbump.exceptions import ConfigError
from peerbump.utils.logger import get_logger
from peerbump.constants import (
    DEFAULT_ANALYSIS_DIRECTORY,
    DEFAULT_REGISTRIES,
    DEFAULT_VERIFY_INCOMPATIBLE_BASELINE,
)

logger = get_logger("config")


@dataclass
class PeerbumpConfig:
    """Effective settings for one run.

    Attributes:
        registries: Registry base URLs, most preferred first. Only the
            first one is consulted for the current-version check.
        verify_incompatible_baseline: Keep searching for a candidate even
            when the version in use is already incompatible.
        analysis_directory: Default folder for ``<dependency>.json`` results.
        source_path: File the settings came from; None means defaults.
    """

    registries: List[str] = field(default_factory=lambda: list(DEFAULT_REGISTRIES))
    verify_incompatible_baseline: bool = DEFAULT_VERIFY_INCOMPATIBLE_BASELINE
    analysis_directory: str = DEFAULT_ANALYSIS_DIRECTORY

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "registries": list(self.registries),
            "verify_incompatible_baseline": self.verify_incompatible_baseline,
            "analysis_directory": self.analysis_directory,
        }


# ---------------------------------------------------------------------------
# Option validators
# ---------------------------------------------------------------------------


def _registries(value: Any) -> List[str]:
    if not isinstance(value, list) or not value:
        raise ValueError("registries must be a non-empty list of URLs")
    if not all(isinstance(url, str) and url.strip() for url in value):
        raise ValueError("registries must be a non-empty list of URLs")
    return [url.strip().rstrip("/") for url in value]


def _verify_incompatible_baseline(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(
            f"verify_incompatible_baseline must be a boolean, got {type(value).__name__}"
        )
    return value


def _analysis_directory(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("analysis_directory must be a non-empty string")
    return value


_OPTIONS: Dict[str, Callable[[Any], Any]] = {
    "registries": _registries,
    "verify_incompatible_baseline": _verify_incompatible_baseline,
    "analysis_directory": _analysis_directory,
}


# ---------------------------------------------------------------------------
# Discovery and loading
# ---------------------------------------------------------------------------


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Return the settings file to use, or None when there is none.

    Raises:
        ConfigError: ``explicit_path`` was given but is not a file.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        return resolved

    cwd = Path.cwd()
    dedicated = cwd / "peerbump.toml"
    if dedicated.is_file():
        return dedicated

    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file() and _pyproject_has_peerbump_section(pyproject):
        return pyproject

    return None


def _pyproject_has_peerbump_section(path: Path) -> bool:
    # A broken pyproject.toml belongs to the project, not to us: skip it.
    try:
        tool = _read_toml(path).get("tool")
    except ConfigError:
        return False
    return isinstance(tool, dict) and "peerbump" in tool


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path.name}: {exc}", config_path=str(path)) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}", config_path=str(path)
        ) from exc


def _section_of(path: Path, document: Dict[str, Any]) -> Dict[str, Any]:
    if path.name == "pyproject.toml":
        return document.get("tool", {}).get("peerbump", {})
    return document.get("peerbump", {})


def _parse_section(section: Dict[str, Any], *, config_path: str) -> PeerbumpConfig:
    """Validate a ``[peerbump]`` table into a :class:`PeerbumpConfig`.

    Raises:
        ConfigError: The table has unknown keys or a badly typed value.
    """
    unknown = sorted(set(section) - set(_OPTIONS))
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            config_path=config_path,
        )

    values: Dict[str, Any] = {}
    for option, validate in _OPTIONS.items():
        if option not in section:
            continue
        try:
            values[option] = validate(section[option])
        except ValueError as exc:
            raise ConfigError(str(exc), config_path=config_path, option=option) from exc

    return PeerbumpConfig(**values)


def load_config(config_path: Optional[Path] = None) -> PeerbumpConfig:
    """Discover, read and validate the settings for this run.

    Args:
        config_path: Explicit file, bypassing discovery.

    Raises:
        ConfigError: The file cannot be read, is not TOML, or is invalid.
    """
    resolved = discover_config_file(config_path)
    if resolved is None:
        logger.debug("No configuration file, using defaults")
        return PeerbumpConfig()

    logger.info("Reading configuration from %s", resolved)
    config = _parse_section(_section_of(resolved, _read_toml(resolved)), config_path=str(resolved))
    config.source_path = resolved
    return config
