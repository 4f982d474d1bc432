"""Registry-backed candidate source and compatibility oracle for peerbump.

Provides an async-safe, per-process cache of package metadata read from
one or more JSON package registries (PyPI or any mirror exposing the
same ``/{package}/json`` API). All public helpers on :class:`PackageIndex`
are ``async`` because they may trigger a network round-trip; each
(registry, package) pair is fetched at most once.

:class:`PackageIndex` fulfils two collaborator roles at once:

- **Version candidate source**: :meth:`PackageIndex.list_candidates`
  reports every uploaded version with the registries hosting it.
- **Compatibility oracle**: :meth:`PackageIndex.is_compatible` judges a
  version against the ``requires_python`` metadata of one registry.

Typical usage::

    from peerbump.utils.http import HTTPClient
    from peerbump.core.package_index import PackageIndex

    async with HTTPClient() as client:
        index = PackageIndex(client, ["https://pypi.org/pypi"])
        candidates = await index.list_candidates("requests")
        ok = await index.is_compatible(
            "https://pypi.org/pypi", "requests", "2.31.0", [Platform.parse("py3.11")]
        )
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from packaging.version import InvalidVersion
from packaging.specifiers import InvalidSpecifier, SpecifierSet

from peerbump.exceptions import RegistryError
from peerbump.utils.http import HTTPClient
from peerbump.utils.logger import get_logger
from peerbump.utils.version_utils import parse_version
from peerbump.models.candidate import CandidateVersion
from peerbump.models.platform import Platform
from peerbump.constants import (
    DEFAULT_REGISTRIES,
    REGISTRY_PACKAGE_URL,
    REGISTRY_RELEASE_URL,
)

logger = get_logger("package_index")

# Public API
__all__ = ["PackageIndex", "RegistryPackage"]


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------


@dataclass
class RegistryPackage:
    """Metadata of one package as published on one registry.

    Attributes:
        registry: Registry base URL the data came from.
        name: Package name as requested.
        versions: Version text of every release with uploaded files, in
            the order the registry lists them.
        python_requirements: Maps version text to its ``requires_python``
            specifier (``None`` when the upload omits it).
        latest_version: Version reported in ``info.version``.
        dependencies_cache: Per-version ``requires_dist`` lists; seeded
            with the latest version on construction.
    """

    registry: str
    name: str
    versions: List[str] = field(default_factory=list)
    python_requirements: Dict[str, Optional[str]] = field(default_factory=dict)
    latest_version: Optional[str] = None
    dependencies_cache: Dict[str, List[str]] = field(default_factory=dict)

    def hosts(self, version: str) -> bool:
        """True when *version* has uploaded files on this registry."""
        return version in self.python_requirements

    def is_python_compatible(self, version: str, python_version: str) -> bool:
        """Check whether *version* supports the given Python version.

        A missing or malformed ``requires_python`` counts as compatible,
        matching pip's own permissive behaviour.

        Example::

            >>> pkg.python_requirements["1.4.2"] = ">=3.8"
            >>> pkg.is_python_compatible("1.4.2", "3.11")
            True
            >>> pkg.is_python_compatible("1.4.2", "3.7")
            False
        """
        requires_python = self.python_requirements.get(version)
        if not requires_python:
            return True

        try:
            return python_version in SpecifierSet(requires_python)
        except InvalidSpecifier:
            return True


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class PackageIndex:
    """Async-safe cache of package metadata across several registries.

    A :class:`asyncio.Semaphore` limits concurrent outbound fetches and a
    double-checked lookup inside it keeps two coroutines from fetching
    the same (registry, package) pair.

    Args:
        http_client: A pre-configured :class:`HTTPClient` instance.
        registries: Registry base URLs, in preference order.
        concurrent_limit: Maximum number of fetches in flight at once.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        registries: Optional[Sequence[str]] = None,
        concurrent_limit: int = 10,
    ) -> None:
        self.http_client = http_client
        self.registries: Tuple[str, ...] = tuple(
            registry.rstrip("/") for registry in (registries or DEFAULT_REGISTRIES)
        )
        self._semaphore = asyncio.Semaphore(concurrent_limit)

        # (registry, name) -> parsed package, or None when not hosted there
        self._packages: Dict[Tuple[str, str], Optional[RegistryPackage]] = {}

    # ------------------------------------------------------------------
    # Collaborator API
    # ------------------------------------------------------------------

    async def list_candidates(self, name: str) -> List[CandidateVersion]:
        """List every known version of *name* with its hosting registries.

        Registries are queried in configured order; a registry answering
        404 simply does not host the package. Versions that are not valid
        PEP 440 text are skipped.

        Raises:
            RegistryError: No configured registry hosts the package.
        """
        hosting: Dict[str, List[str]] = {}

        for registry in self.registries:
            package = await self.get_package(registry, name)
            if package is None:
                continue
            for version in package.versions:
                hosting.setdefault(version, []).append(registry)

        if not hosting:
            raise RegistryError(
                f"Package '{name}' not found on any configured registry",
                package_name=name,
            )

        candidates: List[CandidateVersion] = []
        for text, registries in hosting.items():
            try:
                parse_version(text)
            except InvalidVersion:
                logger.debug("Skipping non-PEP 440 version %s of %s", text, name)
                continue
            candidates.append(CandidateVersion.from_text(text, registries))

        logger.debug(
            "%s: %d version(s) across %d registry(ies)",
            name,
            len(candidates),
            len(self.registries),
        )
        return candidates

    async def is_compatible(
        self,
        registry: str,
        name: str,
        version: str,
        platforms: Sequence[Platform],
    ) -> bool:
        """Judge whether *version* of *name* works on every platform.

        Only Python runtimes can be judged from registry metadata; other
        runtimes are reported compatible.

        Raises:
            RegistryError: *registry* does not host *version* of *name*.
        """
        package = await self.get_package(registry, name)
        if package is None or not package.hosts(version):
            raise RegistryError(
                f"{name} {version} is not hosted on {registry}",
                package_name=name,
                registry=registry,
            )

        for platform in platforms:
            python_version = platform.python_version
            if python_version is None:
                logger.debug(
                    "Cannot judge %s %s for runtime %s; assuming compatible",
                    name,
                    version,
                    platform,
                )
                continue
            if not package.is_python_compatible(version, python_version):
                return False

        return True

    # ------------------------------------------------------------------
    # Metadata accessors
    # ------------------------------------------------------------------

    async def get_package(self, registry: str, name: str) -> Optional[RegistryPackage]:
        """Fetch (or return cached) metadata of *name* on *registry*.

        Returns:
            The parsed package, or ``None`` when the registry answers 404.

        Raises:
            NetworkError: Any other HTTP or transport failure.
        """
        cache_key = (registry, name.casefold())

        if cache_key in self._packages:
            return self._packages[cache_key]

        async with self._semaphore:
            if cache_key in self._packages:
                return self._packages[cache_key]

            url = REGISTRY_PACKAGE_URL.format(registry=registry, package=name)
            try:
                data = await self.http_client.get_json(url)
            except RegistryError as exc:
                if exc.status_code != 404:
                    raise
                logger.debug("%s is not hosted on %s", name, registry)
                self._packages[cache_key] = None
                return None

            package = self._parse_package(registry, name, data)
            self._packages[cache_key] = package
            return package

    async def get_requires_dist(
        self,
        registry: str,
        name: str,
        version: str,
    ) -> List[str]:
        """Return the raw ``requires_dist`` entries of one release.

        The latest release is served from the package document; others
        trigger a ``/{package}/{version}/json`` fetch whose result is
        cached on the package.

        Raises:
            RegistryError: The package or release is not on *registry*.
        """
        package = await self.get_package(registry, name)
        if package is None:
            raise RegistryError(
                f"Package '{name}' not found on {registry}",
                package_name=name,
                registry=registry,
            )

        if version in package.dependencies_cache:
            return package.dependencies_cache[version]

        async with self._semaphore:
            if version in package.dependencies_cache:
                return package.dependencies_cache[version]

            url = REGISTRY_RELEASE_URL.format(
                registry=registry, package=name, version=version
            )
            data = await self.http_client.get_json(url)
            deps = self._requires_dist(data.get("info") or {})
            package.dependencies_cache[version] = deps
            return deps

    # ------------------------------------------------------------------
    # Parsing helpers (private, synchronous)
    # ------------------------------------------------------------------

    def _parse_package(
        self,
        registry: str,
        name: str,
        data: Dict[str, Any],
    ) -> RegistryPackage:
        """Transform a raw registry JSON document into :class:`RegistryPackage`.

        Releases without uploaded files are dropped.
        """
        info = data.get("info") or {}
        releases = data.get("releases") or {}

        versions: List[str] = []
        python_requirements: Dict[str, Optional[str]] = {}

        for version, files in releases.items():
            if not files:
                continue

            versions.append(version)

            # First file declaring requires_python speaks for the release
            for file_info in files:
                if file_info.get("requires_python"):
                    python_requirements[version] = file_info["requires_python"]
                    break
            else:
                python_requirements[version] = None

        latest_version: Optional[str] = info.get("version")
        return RegistryPackage(
            registry=registry,
            name=name,
            versions=versions,
            python_requirements=python_requirements,
            latest_version=latest_version,
            dependencies_cache=(
                {latest_version: self._requires_dist(info)} if latest_version else {}
            ),
        )

    @staticmethod
    def _requires_dist(info: Dict[str, Any]) -> List[str]:
        """Pull the PEP 508 ``requires_dist`` strings out of ``info``.

        Markers are kept; the closure walk evaluates them per platform.
        """
        return [entry for entry in (info.get("requires_dist") or []) if entry.strip()]
