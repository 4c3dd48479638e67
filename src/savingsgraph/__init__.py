"""savingsgraph package entry points."""
from __future__ import annotations

import sys

# Avoid leaving ``__pycache__`` folders behind when the renderer runs.
sys.dont_write_bytecode = True

from .cli import build_parser, run_cli
from .coordinator import RenderCoordinator, RenderCycle
from .surface import DrawingSurface

__all__ = ["DrawingSurface", "RenderCoordinator", "RenderCycle", "build_parser", "main", "run_cli"]


def main(argv=None) -> None:
    """Console entry point."""

    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(run_cli(args, parser))
