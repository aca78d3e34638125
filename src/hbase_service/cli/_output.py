"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any


def print_table(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print rows under a header (text) or as a JSON array of header-keyed objects.

    Text columns are left-aligned to the widest value; values past the last
    header are dropped.
    """
    if json_mode:
        print(json.dumps([dict(zip(headers, row)) for row in rows], indent=2, default=str))
        return
    if not rows:
        return

    text_rows = [[str(value) for value in row[: len(headers)]] for row in rows]
    widths = [
        max([len(header)] + [len(row[i]) for row in text_rows if i < len(row)])
        for i, header in enumerate(headers)
    ]

    def render(values: list[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths))

    print(render(headers))
    print(render(["-" * width for width in widths]))
    for row in text_rows:
        print(render(row))


def print_object(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print a single object as JSON or key-value pairs."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return
    for k, v in data.items():
        print(f"{k}: {v}")


def print_json_line(data: dict[str, Any]) -> None:
    print(json.dumps(data, default=str))


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)
