"""
peerbump command line.

The ``peerbump`` group resolves the options every subcommand shares
(configuration file, verbosity, colour) into a :class:`PeerbumpContext`
and then hands over to the subcommand. :func:`main` turns whatever the
command raised into a process exit code.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from peerbump.config import load_config, PeerbumpConfig
from peerbump.__version__ import __version__
from peerbump.context import PeerbumpContext
from peerbump.exceptions import ConfigError, PeerbumpError
from peerbump.utils.logger import get_logger, setup_logging
from peerbump.utils.console import print_error, print_warning, reconfigure_console
from peerbump.commands.analyze import analyze

logger = get_logger("cli")

# Log level for -v count 0, 1 and 2+.
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    envvar="PEERBUMP_CONFIG",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (peerbump.toml or pyproject.toml).",
)
@click.option("--verbose", "-v", count=True, help="More logging: -v info, -vv debug.")
@click.option(
    "--color/--no-color",
    default=True,
    envvar="PEERBUMP_COLOR",
    help="Colour terminal output.",
)
@click.version_option(__version__, prog_name="peerbump", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """peerbump: find a safe version bump for one dependency in a workspace.

    \b
    Commands:
      analyze   Resolve the newest compatible version and its peer updates

    \b
    Examples:
      peerbump analyze -d discovery.json -t dependency.json
      peerbump -vv analyze -d discovery.json -t dependency.json --format json
    """
    _configure_logging(verbose)

    try:
        settings = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(EXIT_FAILURE) from exc

    _apply_color_preference(color)
    ctx.obj = _build_context(config, verbose, color, settings)

    logger.debug(
        "peerbump %s (config=%s, verbose=%d, color=%s)",
        __version__,
        ctx.obj.config_path,
        verbose,
        color,
    )
    if settings.source_path is not None:
        logger.debug("Effective settings: %s", settings.to_log_dict())


cli.add_command(analyze)


def _configure_logging(verbose: int) -> None:
    level = VERBOSITY_LEVELS[min(max(verbose, 0), len(VERBOSITY_LEVELS) - 1)]
    setup_logging(level=level, verbose=level == logging.DEBUG)


def _apply_color_preference(color: bool) -> None:
    """Mirror ``--no-color`` into ``NO_COLOR`` so Rich and subprocesses agree."""
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()


def _build_context(
    config: Optional[Path],
    verbose: int,
    color: bool,
    settings: PeerbumpConfig,
) -> PeerbumpContext:
    context = PeerbumpContext()
    context.config_path = config or settings.source_path
    context.verbose = verbose
    context.color = color
    context.config = settings
    return context


def main() -> int:
    """Run the CLI and translate its outcome into an exit code.

    Returns:
        0 on success, 1 on any failure, 2 for bad usage and 130 when the
        user interrupts the run.
    """
    try:
        cli(standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Exit as exc:
        return exc.exit_code
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_FAILURE
    except (KeyboardInterrupt, click.exceptions.Abort):
        print_warning("Interrupted, no analysis written")
        return EXIT_INTERRUPTED
    except PeerbumpError as exc:
        print_error(str(exc))
        logger.debug("Failure details: %s", exc.details or "<none>", exc_info=True)
        return EXIT_FAILURE
    except Exception as exc:
        logger.exception("Unhandled error while running peerbump")
        print_error(f"Unexpected error: {exc}")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
