from __future__ import annotations

from unittest.mock import patch

import pytest

import peerbump.cli
from peerbump.__main__ import main


@pytest.mark.unit
@pytest.mark.parametrize("code", [0, 1, 130])
def test_module_entry_forwards_cli_exit_code(code: int) -> None:
    with patch.object(peerbump.cli, "main", return_value=code) as run_cli:
        assert main() == code

    run_cli.assert_called_once_with()
