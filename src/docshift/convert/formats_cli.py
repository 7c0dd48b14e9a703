"""``docshift formats``: show the supported conversion pairs."""

from __future__ import annotations

import argparse
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .errors import UnsupportedPathError
from .formats import (
    CONVERSION_MAP,
    FormatSpecifier,
    allowed_targets,
    display_name,
    file_extension,
    parse_format,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docshift formats",
        description="List input formats and the targets each converts to.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="Only show targets for this format (name, extension, media type).",
    )
    return parser


def build_table(sources: Sequence[FormatSpecifier]) -> Table:
    table = Table(title="Supported conversions")
    table.add_column("Format", style="bold")
    table.add_column("Extension")
    table.add_column("Media type", overflow="fold")
    table.add_column("Targets")
    for source in sources:
        targets = ", ".join(fmt.name for fmt in allowed_targets(source))
        table.add_row(
            display_name(source),
            file_extension(source),
            source.media_type,
            targets or "-",
        )
    return table


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = Console()

    if args.source:
        try:
            sources = [parse_format(args.source)]
        except UnsupportedPathError as exc:
            Console(stderr=True).print(f"error: {exc}", markup=False)
            return 1
    else:
        sources = list(CONVERSION_MAP)

    console.print(build_table(sources))
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
