from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from peerbump.cli import cli
from peerbump.commands.analyze import _create_peer_row
from peerbump.models.candidate import CandidateVersion
from peerbump.models.dependency import Dependency, DependencyType
from peerbump.models.platform import Platform
from peerbump.models.result import PeerDependency

REGISTRY = "https://pypi.org/pypi"


class FakeIndex:
    """Stands in for PackageIndex; every version is compatible."""

    instances: List["FakeIndex"] = []

    def __init__(self, http_client: Any, registries: Sequence[str]) -> None:
        self.registries = list(registries)
        self.versions = ["1.0.0", "1.1.0"]
        FakeIndex.instances.append(self)

    async def list_candidates(self, name: str) -> List[CandidateVersion]:
        return [CandidateVersion.from_text(v, [REGISTRY]) for v in self.versions]

    async def is_compatible(
        self,
        registry: str,
        name: str,
        version: str,
        platforms: Sequence[Platform],
    ) -> bool:
        return True


class FakeClosureService:
    def __init__(self, index: FakeIndex) -> None:
        self.index = index

    async def closure(
        self,
        workspace_path: str,
        project_path: str,
        platform: Platform,
        pinned: Dependency,
    ) -> List[Dependency]:
        return [pinned, Dependency("Bar", "2.0.0", DependencyType.REQUIREMENT)]


def _snapshot() -> Dict[str, Any]:
    return {
        "file_path": "",
        "projects": [
            {
                "file_path": "app/pyproject.toml",
                "target_platforms": ["py3.11"],
                "dependencies": [
                    {"name": "Foo", "requirement": "==1.0.0", "variable": "StackVer"},
                    {"name": "Bar", "requirement": "==1.0.0", "variable": "StackVer"},
                ],
            }
        ],
    }


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A directory holding both input files, used as working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("PEERBUMP_CONFIG", raising=False)
    (tmp_path / "discovery.json").write_text(json.dumps(_snapshot()), encoding="utf-8")
    (tmp_path / "dependency.json").write_text(
        json.dumps({"name": "Foo", "version": "1.0.0"}), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture(autouse=True)
def fake_collaborators():
    FakeIndex.instances = []
    with patch("peerbump.commands.analyze.PackageIndex", FakeIndex), patch(
        "peerbump.commands.analyze.IndexClosureService", FakeClosureService
    ):
        yield


def _invoke(*args: str):
    return CliRunner().invoke(
        cli,
        ["--no-color", "analyze", "-d", "discovery.json", "-t", "dependency.json", *args],
    )


@pytest.mark.unit
class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_writes_result_and_prints_summary(self, workspace: Path) -> None:
        result = _invoke("-o", "out")

        assert result.exit_code == 0, result.output
        assert "1.1.0" in result.output
        assert "Peer Dependency Updates" in result.output
        assert "Analysis written to" in result.output

        written = json.loads((workspace / "out" / "Foo.json").read_text(encoding="utf-8"))
        assert written == {
            "updated_version": "1.1.0",
            "can_update": True,
            "shared_variable_version": True,
            "updated_dependencies": [
                {"name": "Bar", "version": "2.0.0", "category": "REQUIREMENT"},
                {"name": "Foo", "version": "1.1.0", "category": "UNKNOWN"},
            ],
        }

    def test_json_format(self, workspace: Path) -> None:
        result = _invoke("-o", "out", "--format", "json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["updated_version"] == "1.1.0"

    def test_default_analysis_directory_from_config(self, workspace: Path) -> None:
        (workspace / "peerbump.toml").write_text(
            "[peerbump]\nanalysis_directory = 'reports'\n", encoding="utf-8"
        )

        result = _invoke()

        assert result.exit_code == 0, result.output
        assert (workspace / "reports" / "Foo.json").is_file()

    def test_registries_from_config(self, workspace: Path) -> None:
        (workspace / "peerbump.toml").write_text(
            "[peerbump]\nregistries = ['https://mirror.example/pypi']\n",
            encoding="utf-8",
        )

        result = _invoke("-o", "out")

        assert result.exit_code == 0, result.output
        assert FakeIndex.instances[0].registries == ["https://mirror.example/pypi"]

    def test_no_update(
        self, workspace: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(FakeIndex, "is_compatible", _only_current_compatible)

        result = _invoke("-o", "out")

        assert result.exit_code == 0, result.output
        assert "No update found for Foo 1.0.0" in result.output
        written = json.loads((workspace / "out" / "Foo.json").read_text(encoding="utf-8"))
        assert written["can_update"] is False
        assert written["updated_version"] == "1.0.0"
        assert written["updated_dependencies"] == []

    def test_missing_input_exits_one(self, workspace: Path) -> None:
        (workspace / "discovery.json").unlink()

        result = _invoke("-o", "out")

        assert result.exit_code == 1
        assert "workspace snapshot file not found" in result.output

    def test_malformed_input_exits_one(self, workspace: Path) -> None:
        (workspace / "dependency.json").write_text("", encoding="utf-8")

        result = _invoke("-o", "out")

        assert result.exit_code == 1
        assert "empty" in result.output

    def test_requires_input_options(self, workspace: Path) -> None:
        result = CliRunner().invoke(cli, ["analyze"])

        assert result.exit_code == 2
        assert "--discovery-file" in result.output


async def _only_current_compatible(
    self: FakeIndex,
    registry: str,
    name: str,
    version: str,
    platforms: Sequence[Platform],
) -> bool:
    return version == "1.0.0"


@pytest.mark.unit
class TestCreatePeerRow:
    """Tests for _create_peer_row."""

    def test_marks_target(self) -> None:
        row = _create_peer_row("foo", PeerDependency("Foo", "1.1.0"))

        assert row == {"Package": "Foo (target)", "Version": "1.1.0", "Category": "UNKNOWN"}

    def test_other_peer(self) -> None:
        row = _create_peer_row(
            "foo", PeerDependency("Bar", "2.0.0", DependencyType.BUILD)
        )

        assert row == {"Package": "Bar", "Version": "2.0.0", "Category": "BUILD"}
