"""TOML file helpers shared by docshift configuration and credentials."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, MutableMapping

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - defensive guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "ConfigFileError",
    "dump_toml_table",
    "load_toml",
    "merge_defaults",
    "write_private_text",
]


class ConfigFileError(RuntimeError):
    """Raised when a TOML file cannot be read, validated, or written."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    Errors are surfaced as :class:`ConfigFileError` so callers can translate
    them into their own exception types.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigFileError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(f"Failed to parse TOML in {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Recursively merge ``override`` into ``base``, rejecting unknown keys."""

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigFileError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigFileError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            merge_defaults(base_value, value, path=f"{dotted}.")
            continue
        base[key] = value


def dump_toml_table(table: str, values: Mapping[str, str]) -> str:
    """Render a single TOML table of string values.

    JSON string escapes are a subset of TOML basic-string escapes, so
    ``json.dumps`` produces valid TOML values.
    """

    lines = [f"[{table}]"]
    for key in sorted(values):
        lines.append(f"{key} = {json.dumps(values[key])}")
    return "\n".join(lines) + "\n"


def write_private_text(
    path: Path,
    *,
    text: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``text`` to ``path`` with restrictive permissions."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigFileError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text)
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
