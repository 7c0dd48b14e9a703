"""``docshift init``: prepare the workspace and the default config."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from docshift.core import config_templates
from docshift.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docshift init",
        description=(
            "Create the docshift workspace (config, logs, converted) and "
            "write the default convert.toml."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to DOCSHIFT_DATA_HOME or "
            "~/.docshift-data)."
        ),
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing convert.toml with the packaged template.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _status(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    template = config_templates.get_template("convert")
    config_path = layout.path_for("config") / template.filename
    if config_path.exists() and not args.overwrite:
        config_status = "exists"
    else:
        try:
            template.write(layout.path_for("config"), overwrite=args.overwrite)
        except config_templates.ConfigTemplateError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 1
        config_status = "written"

    if args.quiet:
        return 0

    lines = [f"Workspace ready at {layout.home} ({_status(layout.created, 'home')})"]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        lines.append(
            f"  {name.ljust(width)}  {directory} ({_status(layout.created, name)})"
        )
    lines.append(f"Config: {config_path} ({config_status})")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
