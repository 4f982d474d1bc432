"""
Per-invocation state handed from the ``peerbump`` group to its commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from peerbump.config import PeerbumpConfig


class PeerbumpContext:
    """Resolved global options, stored on ``click.Context.obj``.

    Attributes:
        config_path: Settings file in effect, if any.
        verbose: Number of ``-v`` flags given.
        color: False after ``--no-color``.
        config: Effective settings; defaults until the group loads a file.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: PeerbumpConfig = PeerbumpConfig()


# Commands run without the group (e.g. in tests) get a default context.
pass_context = click.make_pass_decorator(PeerbumpContext, ensure=True)
