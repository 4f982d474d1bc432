from __future__ import annotations

import pytest

from peerbump.models.dependency import (
    Dependency,
    DependencyDeclaration,
    DependencyKey,
    DependencyType,
    VariableBinding,
)
from peerbump.models.requirement import VersionRequirement


@pytest.mark.unit
class TestDependencyKey:
    """Tests for case-insensitive dependency identity."""

    def test_equality_ignores_case(self) -> None:
        assert DependencyKey("Requests") == DependencyKey("requests")
        assert DependencyKey("REQUESTS") == DependencyKey("requests")

    def test_hash_matches_equality(self) -> None:
        keys = {DependencyKey("Foo"), DependencyKey("foo"), DependencyKey("FOO")}

        assert len(keys) == 1

    def test_different_names_differ(self) -> None:
        assert DependencyKey("foo") != DependencyKey("bar")

    def test_separators_are_significant(self) -> None:
        """Only case is folded; '-' and '_' stay distinct."""
        assert DependencyKey("typing-extensions") != DependencyKey("typing_extensions")

    def test_keeps_original_spelling(self) -> None:
        key = DependencyKey("PyYAML")

        assert key.name == "PyYAML"
        assert str(key) == "PyYAML"
        assert key.folded == "pyyaml"

    def test_ordering_uses_folded_name(self) -> None:
        keys = sorted([DependencyKey("beta"), DependencyKey("Alpha"), DependencyKey("gamma")])

        assert [k.name for k in keys] == ["Alpha", "beta", "gamma"]

    def test_not_equal_to_plain_string(self) -> None:
        assert DependencyKey("foo") != "foo"


@pytest.mark.unit
class TestDependencyType:
    """Tests for DependencyType name decoding."""

    def test_from_name(self) -> None:
        assert DependencyType.from_name("REQUIREMENT") is DependencyType.REQUIREMENT

    def test_from_name_is_case_insensitive(self) -> None:
        assert DependencyType.from_name("development") is DependencyType.DEVELOPMENT

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_name_is_unknown(self, value) -> None:
        assert DependencyType.from_name(value) is DependencyType.UNKNOWN

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown dependency category"):
            DependencyType.from_name("RUNTIME")

    @pytest.mark.parametrize("value", [1, True, ["REQUIREMENT"]])
    def test_non_string_name_raises(self, value) -> None:
        with pytest.raises(ValueError, match="must be a string"):
            DependencyType.from_name(value)


@pytest.mark.unit
class TestDependencyDeclaration:
    """Tests for DependencyDeclaration JSON conversion."""

    def test_from_json_full(self) -> None:
        decl = DependencyDeclaration.from_json(
            {
                "name": "Foo",
                "requirement": "==1.0.0",
                "is_transitive": False,
                "category": "REQUIREMENT",
                "variable": "FOO_VERSION",
            }
        )

        assert decl.name == "Foo"
        assert decl.requirement == VersionRequirement.parse("==1.0.0")
        assert decl.is_transitive is False
        assert decl.category is DependencyType.REQUIREMENT
        assert decl.variable == VariableBinding("FOO_VERSION")
        assert decl.key == DependencyKey("foo")

    def test_from_json_defaults(self) -> None:
        decl = DependencyDeclaration.from_json({"name": "Bar"})

        assert decl.requirement == VersionRequirement.any()
        assert decl.is_transitive is False
        assert decl.category is DependencyType.UNKNOWN
        assert decl.variable is None

    def test_empty_variable_means_unbound(self) -> None:
        decl = DependencyDeclaration.from_json({"name": "Bar", "variable": ""})

        assert decl.variable is None

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"name": ""},
            {"name": 3},
            {"name": "Foo", "is_transitive": "yes"},
            {"name": "Foo", "requirement": 1},
            {"name": "Foo", "variable": 7},
            {"name": "Foo", "category": "NOPE"},
        ],
    )
    def test_from_json_rejects_invalid(self, data) -> None:
        with pytest.raises(ValueError):
            DependencyDeclaration.from_json(data)

    def test_to_json_uses_enum_name_and_requirement_text(self) -> None:
        decl = DependencyDeclaration(
            name="Foo",
            requirement=VersionRequirement.parse(">=1.0,<2.0"),
            is_transitive=True,
            category=DependencyType.CONSTRAINT,
            variable=VariableBinding("SharedVer"),
        )

        data = decl.to_json()

        assert data["category"] == "CONSTRAINT"
        assert data["requirement"] == str(VersionRequirement.parse(">=1.0,<2.0"))
        assert data["variable"] == "SharedVer"
        assert DependencyDeclaration.from_json(data) == decl

    def test_to_json_omits_missing_variable(self) -> None:
        assert "variable" not in DependencyDeclaration(name="Foo").to_json()


@pytest.mark.unit
class TestDependency:
    """Tests for the concrete Dependency record."""

    def test_str(self) -> None:
        assert str(Dependency("Foo", "1.1.0")) == "Foo==1.1.0"

    def test_key(self) -> None:
        assert Dependency("Foo", "1.1.0").key == DependencyKey("FOO")

    def test_default_category(self) -> None:
        assert Dependency("Foo", "1.1.0").category is DependencyType.UNKNOWN
