from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from peerbump.core.closure import IndexClosureService, marker_environment
from peerbump.core.package_index import PackageIndex
from peerbump.exceptions import DataIntegrityError, RegistryError
from peerbump.models.dependency import Dependency, DependencyType
from peerbump.models.platform import Platform
from peerbump.utils.http import HTTPClient

PYPI = "https://pypi.org/pypi"
PY311 = Platform.parse("py3.11")
PY38 = Platform.parse("py3.8")


def _package(
    versions: Mapping[str, Optional[str]],
    requires: Optional[Mapping[str, List[str]]] = None,
) -> Dict[str, Dict[str, Any]]:
    """Responses for one package: the package document plus per-release ones.

    *versions* maps version text to ``requires_python``; *requires* maps
    version text to its ``requires_dist``.
    """
    requires = requires or {}
    latest = list(versions)[-1]
    return {
        "doc": {
            "info": {"version": latest, "requires_dist": requires.get(latest, [])},
            "releases": {
                v: [{"filename": f"x-{v}.tar.gz", "requires_python": rp}]
                for v, rp in versions.items()
            },
        },
        "releases": {v: {"info": {"requires_dist": requires.get(v, [])}} for v in versions},
    }


def _index(packages: Mapping[str, Dict[str, Dict[str, Any]]]) -> PackageIndex:
    responses: Dict[str, Any] = {}
    for name, package in packages.items():
        responses[f"{PYPI}/{name}/json"] = package["doc"]
        for version, doc in package["releases"].items():
            responses[f"{PYPI}/{name}/{version}/json"] = doc

    async def get_json(url: str, **kwargs: Any) -> Dict[str, Any]:
        # registries treat project names case-insensitively
        if url.lower() not in responses:
            raise RegistryError("Not found", url=url, status_code=404)
        return responses[url.lower()]

    client = MagicMock(spec=HTTPClient)
    client.get_json = AsyncMock(side_effect=get_json)
    return PackageIndex(client, [PYPI])


def _by_name(dependencies: List[Dependency]) -> Dict[str, str]:
    return {d.name: d.version for d in dependencies}


@pytest.mark.unit
class TestMarkerEnvironment:
    """Tests for marker_environment."""

    def test_python_platform(self) -> None:
        assert marker_environment(PY311) == {
            "python_version": "3.11",
            "python_full_version": "3.11.0",
        }

    def test_full_version(self) -> None:
        env = marker_environment(Platform.parse("py3.12.4"))

        assert env == {"python_version": "3.12", "python_full_version": "3.12.4"}

    def test_major_only(self) -> None:
        assert marker_environment(Platform.parse("py3"))["python_full_version"] == "3.0.0"

    def test_other_runtime(self) -> None:
        assert marker_environment(Platform.parse("node18.0")) == {}


@pytest.mark.unit
class TestIndexClosureService:
    """Tests for IndexClosureService.closure."""

    @pytest.mark.asyncio
    async def test_walks_transitive_requirements(self) -> None:
        index = _index(
            {
                "foo": _package({"1.0": None, "1.1": None}, {"1.1": ["bar>=2,<3"]}),
                "bar": _package(
                    {"1.5": None, "2.0": None, "2.4": None, "3.0": None},
                    {"2.4": ["baz"]},
                ),
                "baz": _package({"0.1": None, "0.2": None}),
            }
        )

        deps = await IndexClosureService(index).closure(
            "/repo", "app", PY311, Dependency("foo", "1.1")
        )

        assert _by_name(deps) == {"foo": "1.1", "bar": "2.4", "baz": "0.2"}
        assert all(d.category is DependencyType.UNKNOWN for d in deps)

    @pytest.mark.asyncio
    async def test_uses_requested_release_metadata(self) -> None:
        index = _index(
            {
                "foo": _package({"1.0": None, "1.1": None}, {"1.0": ["bar"], "1.1": []}),
                "bar": _package({"1.0": None}),
            }
        )

        deps = await IndexClosureService(index).closure(
            "/repo", "app", PY311, Dependency("foo", "1.0")
        )

        assert _by_name(deps) == {"foo": "1.0", "bar": "1.0"}

    @pytest.mark.asyncio
    async def test_markers_evaluated_per_platform(self) -> None:
        index = _index(
            {
                "foo": _package(
                    {"1.0": None},
                    {"1.0": ['tomli; python_version < "3.11"', 'docs-tool; extra == "docs"']},
                ),
                "tomli": _package({"2.0.1": None}),
                "docs-tool": _package({"1.0": None}),
            }
        )
        service = IndexClosureService(index)

        on_311 = await service.closure("/repo", "app", PY311, Dependency("foo", "1.0"))
        on_38 = await service.closure("/repo", "app", PY38, Dependency("foo", "1.0"))

        assert _by_name(on_311) == {"foo": "1.0"}
        assert _by_name(on_38) == {"foo": "1.0", "tomli": "2.0.1"}

    @pytest.mark.asyncio
    async def test_skips_prereleases_and_incompatible(self) -> None:
        index = _index(
            {
                "foo": _package({"1.0": None}, {"1.0": ["bar"]}),
                "bar": _package({"1.0": None, "2.0": ">=3.12", "3.0b1": None}),
            }
        )

        deps = await IndexClosureService(index).closure(
            "/repo", "app", PY311, Dependency("foo", "1.0")
        )

        assert _by_name(deps)["bar"] == "1.0"

    @pytest.mark.asyncio
    async def test_first_resolution_wins(self) -> None:
        index = _index(
            {
                "foo": _package({"1.0": None}, {"1.0": ["Bar>=1", "qux"]}),
                "qux": _package({"1.0": None}, {"1.0": ["bar<2"]}),
                "bar": _package({"1.0": None, "2.0": None}),
            }
        )

        deps = await IndexClosureService(index).closure(
            "/repo", "app", PY311, Dependency("foo", "1.0")
        )

        assert _by_name(deps) == {"foo": "1.0", "Bar": "2.0", "qux": "1.0"}

    @pytest.mark.asyncio
    async def test_unsatisfiable_requirement_is_skipped(self) -> None:
        index = _index(
            {
                "foo": _package({"1.0": None}, {"1.0": ["bar>=5", "not a requirement!"]}),
                "bar": _package({"1.0": None}),
            }
        )

        deps = await IndexClosureService(index).closure(
            "/repo", "app", PY311, Dependency("foo", "1.0")
        )

        assert _by_name(deps) == {"foo": "1.0"}

    @pytest.mark.asyncio
    async def test_pinned_version_unknown(self) -> None:
        index = _index({"foo": _package({"1.0": None})})

        with pytest.raises(DataIntegrityError):
            await IndexClosureService(index).closure(
                "/repo", "app", PY311, Dependency("foo", "9.0")
            )

    @pytest.mark.asyncio
    async def test_missing_package_in_tree(self) -> None:
        index = _index({"foo": _package({"1.0": None}, {"1.0": ["ghost"]})})

        with pytest.raises(RegistryError):
            await IndexClosureService(index).closure(
                "/repo", "app", PY311, Dependency("foo", "1.0")
            )
