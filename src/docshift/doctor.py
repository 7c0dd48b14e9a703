"""``docshift doctor``: report workspace, credential, and library health."""

from __future__ import annotations

import argparse
import importlib
import os
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table

from docshift.convert.capabilities import CAPABILITY_PACKAGES
from docshift.convert.config import CONFIG_ENV, CONFIG_FILENAME
from docshift.core import workspace as workspace_mod
from docshift.core.credentials import (
    API_KEY_NAME,
    CREDENTIALS_FILENAME,
    EnvCredentialStore,
    FileCredentialStore,
)

_PURPOSES = {
    "PIL": "image transcoding",
    "openpyxl": "spreadsheets",
    "mammoth": "Word text extraction",
    "docx": "Word output",
    "pptx": "presentations",
    "weasyprint": "PDF output",
    "openai": "AI conversions",
}


@dataclass(frozen=True)
class DependencyStatus:
    module: str
    package: str
    purpose: str
    available: bool
    version: Optional[str]
    error: Optional[str]


@dataclass(frozen=True)
class DoctorReport:
    workspace: Path
    directories: Tuple[Tuple[str, Path, bool], ...]
    config_path: Path
    config_exists: bool
    key_source: Optional[str]
    dependencies: Tuple[DependencyStatus, ...]

    @property
    def healthy(self) -> bool:
        return all(dep.available for dep in self.dependencies)


def generate_report(
    *,
    env: Mapping[str, str] | None = None,
    workspace_path: Path | None = None,
) -> DoctorReport:
    env_map = os.environ if env is None else env
    layout = workspace_mod.ensure_workspace(
        env=env_map, path=workspace_path, create=False
    )
    override = (env_map.get(CONFIG_ENV) or "").strip()
    config_path = (
        Path(override).expanduser()
        if override
        else layout.path_for("config") / CONFIG_FILENAME
    )
    directories = tuple(
        (name, path, path.is_dir()) for name, path in layout.items()
    )
    return DoctorReport(
        workspace=layout.home,
        directories=directories,
        config_path=config_path,
        config_exists=config_path.is_file(),
        key_source=_key_source(env, layout),
        dependencies=check_dependencies(),
    )


def check_dependencies() -> Tuple[DependencyStatus, ...]:
    results = []
    for module, package in CAPABILITY_PACKAGES.items():
        purpose = _PURPOSES.get(module, "")
        try:
            importlib.import_module(module)
        except (ImportError, OSError) as exc:
            results.append(
                DependencyStatus(module, package, purpose, False, None, str(exc))
            )
            continue
        try:
            version = metadata.version(package)
        except metadata.PackageNotFoundError:  # pragma: no cover - rare
            version = None
        results.append(
            DependencyStatus(module, package, purpose, True, version, None)
        )
    return tuple(results)


def _key_source(
    env: Mapping[str, str] | None, layout: workspace_mod.WorkspaceLayout
) -> Optional[str]:
    if EnvCredentialStore(env).get(API_KEY_NAME):
        return "environment"
    saved = layout.path_for("config") / CREDENTIALS_FILENAME
    if saved.is_file() and FileCredentialStore(saved).get(API_KEY_NAME):
        return str(saved)
    return None


def render_report(report: DoctorReport, console: Console) -> None:
    console.print(f"Workspace: {report.workspace}", markup=False)
    for name, path, present in report.directories:
        state = "ok" if present else "missing (run `docshift init`)"
        console.print(f"  {name}: {path} [{state}]", markup=False)
    config_state = "found" if report.config_exists else "not found (defaults apply)"
    console.print(f"Config: {report.config_path} ({config_state})", markup=False)
    console.print(
        f"API key: {report.key_source or 'not configured'}", markup=False
    )

    table = Table(title="Libraries")
    table.add_column("Package")
    table.add_column("Used for")
    table.add_column("Status")
    table.add_column("Version")
    for dep in report.dependencies:
        status = "ok" if dep.available else f"missing: {dep.error}"
        table.add_row(dep.package, dep.purpose, status, dep.version or "-")
    console.print(table)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="docshift doctor",
        description="Check the workspace, API key, and codec libraries.",
    )
    parser.add_argument("--workspace", type=Path, help="Workspace root override.")
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        report = generate_report(workspace_path=args.workspace)
    except workspace_mod.WorkspaceError as exc:
        Console(stderr=True).print(f"error: {exc}", markup=False)
        return 1
    render_report(report, Console())
    return 0 if report.healthy else 1


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
