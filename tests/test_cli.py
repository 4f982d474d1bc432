from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from peerbump.__version__ import __version__
from peerbump.cli import _configure_logging, cli, main
from peerbump.exceptions import PeerbumpError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("PEERBUMP_CONFIG", raising=False)


@pytest.mark.unit
class TestCliGroup:
    """Tests for the top-level click group."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == f"peerbump {__version__}"

    def test_help_lists_analyze(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "analyze" in result.output

    def test_invalid_config_exits_one(self, tmp_path: Path) -> None:
        (tmp_path / "peerbump.toml").write_text(
            "[peerbump]\nverify_incompatible_baseline = 'yes'\n", encoding="utf-8"
        )

        result = CliRunner().invoke(cli, ["analyze", "--help"])

        assert result.exit_code == 1
        assert "verify_incompatible_baseline must be a boolean" in result.output

    def test_no_color_sets_environment(self) -> None:
        result = CliRunner().invoke(cli, ["--no-color", "analyze", "--help"])

        assert result.exit_code == 0
        assert os.environ.get("NO_COLOR") == "1"


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for _configure_logging verbosity mapping."""

    @pytest.mark.parametrize(
        "verbose,level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_levels(self, verbose: int, level: int) -> None:
        with patch("peerbump.cli.setup_logging") as setup:
            _configure_logging(verbose)

        setup.assert_called_once_with(level=level, verbose=level == logging.DEBUG)


@pytest.mark.unit
class TestMainExitCodes:
    """Tests for cli.main exit code mapping."""

    @pytest.mark.parametrize(
        "raised,expected",
        [
            (None, 0),
            (click.UsageError("bad usage"), 2),
            (click.exceptions.Exit(3), 3),
            (SystemExit(1), 1),
            (SystemExit("fatal"), 1),
            (PeerbumpError("boom"), 1),
            (KeyboardInterrupt(), 130),
            (click.exceptions.Abort(), 130),
            (RuntimeError("unexpected"), 1),
        ],
        ids=[
            "success",
            "usage",
            "exit",
            "system-exit",
            "system-exit-message",
            "peerbump-error",
            "keyboard-interrupt",
            "abort",
            "unexpected",
        ],
    )
    def test_exit_code(self, raised, expected: int) -> None:
        with patch("peerbump.cli.cli", side_effect=raised) as mock_cli:
            assert main() == expected

        mock_cli.assert_called_once_with(standalone_mode=False)
