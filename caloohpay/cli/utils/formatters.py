"""Output formatting utilities for CLI."""

from typing import List, Sequence

import click


def format_success(message: str) -> str:
    """Format a success message in green."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message in red."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message in yellow."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message in blue."""
    return click.style(f"ℹ {message}", fg="blue")


def _is_numeric(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def format_table(
    headers: Sequence[str], rows: Sequence[Sequence[str]], max_width: int = 40
) -> str:
    """Format data as a plain-text table.

    Numeric cells are right-aligned so amounts and day counts line up;
    everything else is left-aligned. Cells wider than max_width are truncated.

    Args:
        headers: Column headers
        rows: Data rows (each row is a sequence of cell values)
        max_width: Maximum width for each column (default: 40)

    Returns:
        Formatted table as a string

    Example:
        >>> print(format_table(["User", "TotalComp"], [["YW Oncall", "575"]]))
        +-----------+-----------+
        | User      | TotalComp |
        +-----------+-----------+
        | YW Oncall |       575 |
        +-----------+-----------+
    """
    if not headers:
        return ""

    cells: List[List[str]] = [
        [str(cell)[:max_width] for cell in row[: len(headers)]] for row in rows
    ]

    col_widths = [min(len(h), max_width) for h in headers]
    for row in cells:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(cell))

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def _format_row(values: Sequence[str], align_numbers: bool) -> str:
        formatted = []
        for i, value in enumerate(values):
            if align_numbers and _is_numeric(value):
                formatted.append(f" {value:>{col_widths[i]}} ")
            else:
                formatted.append(f" {value:<{col_widths[i]}} ")
        return "|" + "|".join(formatted) + "|"

    lines = [separator, _format_row([h[:max_width] for h in headers], False), separator]
    if cells:
        lines.extend(_format_row(row, True) for row in cells)
        lines.append(separator)

    return "\n".join(lines)
