"""
peerbump: dependency update impact analysis for multi-project workspaces

peerbump decides, for one dependency of a workspace, which new version to
move to and which sibling dependencies move with it.

Features include:
    • Ordered candidate search (lowest safe fix or highest available)
    • Platform compatibility gating for every consuming project
    • Detection of versions pinned through shared build variables
    • Peer-dependency impact computed from the hypothetical closure

The engine consumes a prior workspace scan and writes one JSON result
per analyzed dependency.
"""

from __future__ import annotations

from peerbump.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "peerbump Contributors"
__license__ = "Apache-2.0"
__description__ = "Update impact analysis for dependencies shared across projects."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
