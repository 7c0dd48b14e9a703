"""Workspace bootstrap for docshift state (config, logs, converted files)."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

WORKSPACE_ENV = "DOCSHIFT_DATA_HOME"
DEFAULT_WORKSPACE = Path.home() / ".docshift-data"
FALLBACK_DIRNAME = "docshift-data"

SUBDIRECTORIES = ("config", "logs", "converted")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace paths and whether each one was newly created."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise WorkspaceError(f"Unknown workspace directory '{key}'.") from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve (and by default create) the workspace.

    ``path`` wins over ``DOCSHIFT_DATA_HOME``, which wins over
    ``~/.docshift-data``. Only the default location falls back to the temp
    directory when it is not writable.
    """

    base, explicit = _resolve_home(os.environ if env is None else env, path)
    candidates = [base]
    if create and not explicit:
        fallback = Path(tempfile.gettempdir()) / FALLBACK_DIRNAME
        if fallback != base:
            candidates.append(fallback)

    failure: Exception | None = None
    for candidate in candidates:
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            failure = exc
    raise WorkspaceError(f"Unable to prepare workspace at {base}") from failure


def _resolve_home(env: Mapping[str, str], override: Path | None) -> tuple[Path, bool]:
    if override is not None:
        target, explicit = override, True
    else:
        custom = (env.get(WORKSPACE_ENV) or "").strip()
        if custom:
            target, explicit = Path(custom), True
        else:
            target, explicit = DEFAULT_WORKSPACE, False
    return target.expanduser().absolute(), explicit


def _build_layout(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )
    created = {"home": _make_private_dir(base) if create else False}
    directories = {}
    for name in SUBDIRECTORIES:
        entry = base / name
        if create:
            created[name] = _make_private_dir(entry)
        else:
            created[name] = False
            if entry.exists() and not entry.is_dir():
                raise WorkspaceError(
                    f"Expected workspace directory for '{name}' but found a "
                    f"file: {entry}"
                )
        directories[name] = entry
    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _make_private_dir(path: Path) -> bool:
    existed = path.exists()
    if existed and not path.is_dir():
        raise WorkspaceError(
            f"Expected directory but found a non-directory entry: {path}"
        )
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
    return not existed


__all__ = [
    "DEFAULT_WORKSPACE",
    "SUBDIRECTORIES",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
