"""Command-line interface for savingsgraph."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .computation import resolve_use_numpy
from .config import DEFAULT_SETTINGS, ChartSettings
from .coordinator import RenderCoordinator, RenderCycle
from .model import Rect
from .overlay import OverlayContainer
from .reporting import SERIES_HEADER, export_csv, format_amount, format_rate, series_rows
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="savingsgraph",
        description="Render a savings projection at a selected rate against the reference rate.",
    )
    parser.add_argument("--rate", type=float, default=5, help="Selected annual interest rate in % (e.g., 5)")
    parser.add_argument("--monthly", type=float, default=30000, help="Monthly contribution amount")
    parser.add_argument("--years", type=int, default=20, help="Savings horizon in years")
    parser.add_argument("--output", default="projection.png", help="Image file to write the chart to")
    parser.add_argument("--csv", default="", help="Optional CSV path for the yearly series")
    parser.add_argument("--width", type=float, default=DEFAULT_SETTINGS.default_width, help="Chart width (CSS px)")
    parser.add_argument("--height", type=float, default=DEFAULT_SETTINGS.default_height, help="Chart height (CSS px)")
    parser.add_argument("--dpr", type=float, default=2.0, help="Device pixel ratio for the bitmap")
    parser.add_argument(
        "--periods", type=int, default=12, help="Compounding periods per year (12=monthly, 4=quarterly, 1=yearly)"
    )
    parser.add_argument(
        "--tax-rate", type=float, default=DEFAULT_SETTINGS.tax_rate, help="Tax rate applied to gains (0-1)"
    )
    parser.add_argument(
        "--engine",
        choices=["auto", "numpy", "python"],
        default="auto",
        help="Computation engine: auto prefers NumPy when available",
    )
    parser.add_argument("--assets", default=None, help="Directory holding images/border-bg.webp")
    parser.add_argument("--no-animation", action="store_true", help="Draw only the final frame")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ChartSettings:
    return DEFAULT_SETTINGS.replace(
        default_width=args.width,
        default_height=args.height,
        periods=args.periods,
        tax_rate=args.tax_rate,
        engine=args.engine,
        asset_root=args.assets,
        animate=not args.no_animation,
    )


def _validate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.years <= 0:
        parser.error("--years must be a positive number of years")
    if args.monthly <= 0:
        parser.error("--monthly must be a positive amount")
    if args.periods <= 0:
        parser.error("--periods must be positive")
    if not 0 <= args.tax_rate < 1:
        parser.error("--tax-rate must be between 0 and 1")
    if args.dpr <= 0:
        parser.error("--dpr must be positive")


async def render_to_file(args: argparse.Namespace, settings: ChartSettings) -> Optional[RenderCycle]:
    container = OverlayContainer(Rect.from_size(0, 0, args.width, args.height))
    surface = DrawingSurface(container, device_pixel_ratio=args.dpr, settings=settings)
    coordinator = RenderCoordinator(settings)
    cycle = await coordinator.render(surface, args.rate, args.monthly, args.years)
    if cycle is None:
        return None
    geometry = await cycle.settled()
    if len(geometry) < 2:
        logger.info("Connector lines incomplete (%d of 2 resolved)", len(geometry))
    surface.save(args.output)
    return cycle


def _print_summary(cycle: RenderCycle, args: argparse.Namespace, settings: ChartSettings) -> None:
    summary = cycle.summary
    unit = settings.currency_unit
    print(f"\nPROJECTION ({args.years} years, {format_amount(args.monthly)} {unit}/month)")
    print(f"Principal:                {format_amount(summary.principal)} {unit}")
    print(f"Total at {format_rate(settings.base_rate_percent)}%:  {format_amount(summary.base_total)} {unit}")
    print(f"Total at {format_rate(args.rate)}%:  {format_amount(summary.selected_total)} {unit}")
    print(f"Difference:               {format_amount(summary.difference)} {unit}")
    print(f"Axis: 0-{format_rate(cycle.axis.max)} step {format_rate(cycle.axis.step)} (x10,000 {unit})")
    print(f"Chart written to {args.output}")


def run_cli(args: argparse.Namespace, parser: Optional[argparse.ArgumentParser] = None) -> int:
    parser = parser or build_parser()
    _validate(parser, args)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        resolve_use_numpy(args.engine)
    except RuntimeError as exc:
        print(f"Warning: {exc} Falling back to pure Python engine.", file=sys.stderr)
        args.engine = "python"

    settings = settings_from_args(args)
    cycle = asyncio.run(render_to_file(args, settings))
    if cycle is None:
        print("Nothing to render for the given inputs.", file=sys.stderr)
        return 1

    if args.csv:
        export_csv(args.csv, SERIES_HEADER, series_rows(cycle.series))
        print(f"Series written to {args.csv}")
    _print_summary(cycle, args, settings)
    return 0


__all__ = ["build_parser", "render_to_file", "run_cli", "settings_from_args"]
