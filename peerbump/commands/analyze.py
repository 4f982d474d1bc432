"""Analyze command implementation for peerbump.

Evaluates updating one dependency across a scanned workspace and writes
the outcome to ``<analysis folder>/<dependency name>.json``.

The command wires the analysis engine to registry-backed collaborators:

1. **PackageIndex**: lists candidate versions across the configured
   registries and judges ``requires_python`` compatibility.
2. **IndexClosureService**: walks registry metadata to compute the
   dependency tree with the target pinned.
3. **Analyzer**: runs shared-variable detection, version resolution and
   peer impact calculation, then writes the result file.

All components share a single :class:`PackageIndex` so each package's
metadata is fetched at most once per registry and invocation.

Typical usage::

    $ peerbump analyze --discovery-file discovery.json --dependency-file foo.json

    # Machine-readable output
    $ peerbump analyze -d discovery.json -t foo.json --format json

    # Always check candidates, even when the current version is incompatible
    $ peerbump analyze -d discovery.json -t foo.json --verify-incompatible-baseline
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from peerbump.exceptions import PeerbumpError
from peerbump.context import pass_context, PeerbumpContext
from peerbump.models import PeerDependency
from peerbump.serialization import SerializerOptions
from peerbump.core import (
    AnalysisReport,
    Analyzer,
    IndexClosureService,
    PackageIndex,
)
from peerbump.utils import (
    HTTPClient,
    get_logger,
    get_update_type,
    print_success,
    print_error,
    print_warning,
    print_table,
    get_raw_console,
    colorize_update_type,
)

logger = get_logger("commands.analyze")


@click.command()
@click.option(
    "--repo-root",
    "-r",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository root the workspace path is relative to.",
)
@click.option(
    "--discovery-file",
    "-d",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Workspace snapshot produced by the workspace scan.",
)
@click.option(
    "--dependency-file",
    "-t",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Description of the dependency to analyze.",
)
@click.option(
    "--analysis-folder",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where the result file is written (default: from configuration).",
)
@click.option(
    "--verify-incompatible-baseline/--no-verify-incompatible-baseline",
    default=None,
    help="Check candidates even when the current version is incompatible.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def analyze(
    ctx: PeerbumpContext,
    repo_root: Path,
    discovery_file: Path,
    dependency_file: Path,
    analysis_folder: Optional[Path],
    verify_incompatible_baseline: Optional[bool],
    format: str,
) -> None:
    """Analyze updating one dependency across the workspace.

    Finds the version the dependency should move to, whether its version
    comes from a build variable shared with other dependencies, and which
    directly referenced dependencies move along with it.

    Command-line options override configuration file values.

    Exits:
        0 when the analysis completed (whether or not an update exists),
        1 when it failed.
    """
    config = ctx.config
    output_dir = analysis_folder or Path(config.analysis_directory)
    verify = (
        config.verify_incompatible_baseline
        if verify_incompatible_baseline is None
        else verify_incompatible_baseline
    )

    try:
        report = asyncio.run(
            _analyze_async(
                registries=config.registries,
                repo_root=repo_root,
                discovery_file=discovery_file,
                dependency_file=dependency_file,
                output_dir=output_dir,
                verify_incompatible_baseline=verify,
            )
        )

    except PeerbumpError as e:
        print_error(f"{e}")
        logger.debug("Error details: %s", e.details or "<none>")
        sys.exit(1)

    if format == "json":
        _display_json(report)
    else:
        _display_summary(report)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _analyze_async(
    *,
    registries: List[str],
    repo_root: Path,
    discovery_file: Path,
    dependency_file: Path,
    output_dir: Path,
    verify_incompatible_baseline: bool,
) -> AnalysisReport:
    """Run the analyzer inside one HTTP session."""
    logger.info("Analyzing %s against %s", dependency_file, discovery_file)

    async with HTTPClient() as http:
        index = PackageIndex(http, registries)
        analyzer = Analyzer(
            index,
            index,
            IndexClosureService(index),
            SerializerOptions(),
            verify_incompatible_baseline=verify_incompatible_baseline,
        )
        return await analyzer.run(
            repo_root,
            discovery_file,
            dependency_file,
            output_dir,
        )


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_summary(report: AnalysisReport) -> None:
    """Render the result for humans: headline, peer table, warnings."""
    target = report.target
    result = report.result
    console = get_raw_console()

    if result.can_update:
        update_type = get_update_type(target.version, result.updated_version)
        console.print(
            f"[bold]{target.name}[/bold]: {target.version} -> "
            f"[bold green]{result.updated_version}[/bold green] "
            f"({colorize_update_type(update_type)})"
        )
    else:
        print_warning(f"No update found for {target.name} {target.version}")

    if result.shared_variable_version:
        print_warning(
            f"The version of {target.name} comes from a variable shared "
            "with other dependencies"
        )

    if result.updated_dependencies:
        data = [_create_peer_row(target.name, peer) for peer in result.updated_dependencies]
        column_styles: Dict[str, Dict[str, Any]] = {
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Version": {"justify": "center", "style": "bold green"},
            "Category": {"justify": "center", "style": "dim"},
        }
        print_table(data, title="Peer Dependency Updates", column_styles=column_styles)

    print_success(f"Analysis written to {report.output_path}")


def _create_peer_row(target_name: str, peer: PeerDependency) -> Dict[str, str]:
    """Table row for one peer; the target itself is highlighted."""
    name = peer.name
    if name.casefold() == target_name.casefold():
        name = f"{name} (target)"
    return {
        "Package": name,
        "Version": peer.version,
        "Category": peer.category.name,
    }


def _display_json(report: AnalysisReport) -> None:
    """Print the result document, as written to disk, on stdout."""
    print(json.dumps(report.result.to_json(), indent=2))
