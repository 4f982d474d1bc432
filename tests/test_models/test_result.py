from __future__ import annotations

import pytest

from peerbump.models.dependency import Dependency, DependencyType
from peerbump.models.result import AnalysisResult, PeerDependency


@pytest.mark.unit
class TestPeerDependency:
    """Tests for PeerDependency conversion."""

    def test_from_dependency(self) -> None:
        peer = PeerDependency.from_dependency(
            Dependency("Bar", "2.0.0", DependencyType.REQUIREMENT)
        )

        assert peer == PeerDependency("Bar", "2.0.0", DependencyType.REQUIREMENT)

    def test_to_json_uses_enum_name(self) -> None:
        assert PeerDependency("Bar", "2.0.0", DependencyType.BUILD).to_json() == {
            "name": "Bar",
            "version": "2.0.0",
            "category": "BUILD",
        }

    def test_from_json_requires_strings(self) -> None:
        with pytest.raises(ValueError):
            PeerDependency.from_json({"name": "Bar", "version": 2})


@pytest.mark.unit
class TestAnalysisResult:
    """Tests for AnalysisResult conversion."""

    def test_to_json(self) -> None:
        result = AnalysisResult(
            updated_version="1.1.0",
            can_update=True,
            shared_variable_version=False,
            updated_dependencies=(PeerDependency("Bar", "2.0.0"),),
        )

        assert result.to_json() == {
            "updated_version": "1.1.0",
            "can_update": True,
            "shared_variable_version": False,
            "updated_dependencies": [
                {"name": "Bar", "version": "2.0.0", "category": "UNKNOWN"}
            ],
        }

    def test_round_trip(self) -> None:
        result = AnalysisResult(
            updated_version="1.0.0",
            can_update=False,
            shared_variable_version=True,
        )

        assert AnalysisResult.from_json(result.to_json()) == result

    @pytest.mark.parametrize(
        "data",
        [
            {"can_update": True, "shared_variable_version": False},
            {"updated_version": "1.0", "can_update": "yes", "shared_variable_version": False},
            {"updated_version": "1.0", "can_update": True},
            {
                "updated_version": "1.0",
                "can_update": True,
                "shared_variable_version": False,
                "updated_dependencies": {},
            },
        ],
    )
    def test_from_json_invalid(self, data) -> None:
        with pytest.raises(ValueError):
            AnalysisResult.from_json(data)
