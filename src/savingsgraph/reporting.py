"""Reporting helpers such as amount formatting and CSV export."""
from __future__ import annotations

import csv
import numbers
from typing import Iterable, Iterator, Sequence, Tuple

from .model import YearlyPoint

SERIES_HEADER = ("Year", "Principal", "Base total", "Selected total")


def format_amount(value: float) -> str:
    """Whole currency units with thousands separators, e.g. ``12,345,678``."""

    return f"{int(round(value)):,}"


def format_rate(rate: float) -> str:
    """Percent value without a trailing ``.0`` for whole numbers."""

    return str(int(rate)) if float(rate).is_integer() else str(rate)


def series_rows(series: Iterable[YearlyPoint]) -> Iterator[Tuple[int, float, float, float]]:
    for point in series:
        yield point.year, point.principal, point.base_total, point.selected_total


def export_csv(path: str, header: Sequence[str], rows: Iterable[Sequence]):
    """Write header/row data to a CSV file."""

    def _format_cell(value: object) -> str:
        """Format cells to avoid decimal places in numeric output."""

        if isinstance(value, numbers.Real):
            return format(value, ".0f")
        return str(value)

    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([_format_cell(h) for h in header])
        for row in rows:
            writer.writerow([_format_cell(cell) for cell in row])


__all__ = ["SERIES_HEADER", "export_csv", "format_amount", "format_rate", "series_rows"]
