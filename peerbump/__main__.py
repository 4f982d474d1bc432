"""Support ``python -m peerbump``; behaves exactly like the ``peerbump`` script."""

from __future__ import annotations

import sys


def main() -> int:
    from peerbump.cli import main as run_cli

    return run_cli()


if __name__ == "__main__":
    sys.exit(main())
