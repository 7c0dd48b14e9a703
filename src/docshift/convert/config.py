"""Configuration loader for ``docshift convert``."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Optional

from docshift.core import config as core_config
from docshift.core import workspace as workspace_mod

from .ai import (
    DEFAULT_MAX_INPUT_CHARS,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    AISettings,
)
from .dispatch import MEGABYTE

CONFIG_FILENAME = "convert.toml"
CONFIG_ENV = "DOCSHIFT_CONVERT_CONFIG"
ENV_PREFIX = "DOCSHIFT_CONVERT_"

_DEFAULT_COLLISION = "version"
_DEFAULT_MAX_INPUT_MB = 100
_DEFAULT_LOG_LEVEL = "INFO"


class ConvertConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


class CollisionPolicy(Enum):
    """What to do when the output file already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    VERSION = "version"

    @classmethod
    def from_value(cls, value: str) -> "CollisionPolicy":
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ConvertConfigError(
            f"Unknown collision policy '{value}'. Expected one of: {expected}."
        )


@dataclass(frozen=True)
class ConvertConfig:
    output_dir: Path
    collision: CollisionPolicy
    max_input_bytes: int
    ai: AISettings
    log_level: str


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced values that win over env and file options."""

    output_dir: Optional[Path] = None
    collision: Optional[CollisionPolicy] = None
    model: Optional[str] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    config: ConvertConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve configuration with precedence CLI > env > TOML > defaults.

    A missing file is only an error when it was requested explicitly, either
    through ``config_path`` or ``DOCSHIFT_CONVERT_CONFIG``.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise ConvertConfigError(str(exc)) from exc

    explicit = config_path is not None or bool(
        (env_map.get(CONFIG_ENV) or "").strip()
    )
    requested = _config_file_path(config_path, env_map, layout)
    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(table, core_config.load_toml(requested))
        except core_config.ConfigFileError as exc:
            raise ConvertConfigError(str(exc)) from exc
        loaded_path = requested
    elif explicit:
        raise ConvertConfigError(f"Config file not found: {requested}")

    paths, execution, ai, logging_table = (
        table["paths"],
        table["execution"],
        table["ai"],
        table["logging"],
    )

    output_dir = _resolve_output_dir(
        _first(
            overrides.output_dir,
            _env_value(env_map, "OUTPUT_DIR", _to_path),
            _to_path(paths["output_dir"], "paths.output_dir"),
        ),
        layout,
    )
    collision = _first(
        overrides.collision,
        _env_value(env_map, "COLLISION", _to_collision),
        _to_collision(execution["collision"], "execution.collision"),
    )
    max_input_mb = _first(
        _env_value(env_map, "MAX_INPUT_MB", _to_positive_number),
        _to_positive_number(execution["max_input_mb"], "execution.max_input_mb"),
    )
    settings = AISettings(
        model=_first(
            overrides.model,
            _env_value(env_map, "MODEL", _to_text),
            _to_text(ai["model"], "ai.model"),
        ),
        temperature=_to_temperature(ai["temperature"], "ai.temperature"),
        max_input_chars=int(
            _to_positive_number(ai["max_input_chars"], "ai.max_input_chars")
        ),
        max_output_tokens=int(
            _to_positive_number(ai["max_output_tokens"], "ai.max_output_tokens")
        ),
    )
    log_level = _first(
        overrides.log_level,
        _env_value(env_map, "LOG_LEVEL", _to_text),
        _to_text(logging_table["level"], "logging.level"),
    ).upper()

    config = ConvertConfig(
        output_dir=output_dir,
        collision=collision,
        max_input_bytes=int(max_input_mb * MEGABYTE),
        ai=settings,
        log_level=log_level,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "paths": {"output_dir": None},
        "execution": {
            "collision": _DEFAULT_COLLISION,
            "max_input_mb": _DEFAULT_MAX_INPUT_MB,
        },
        "ai": {
            "model": DEFAULT_MODEL,
            "temperature": DEFAULT_TEMPERATURE,
            "max_input_chars": DEFAULT_MAX_INPUT_CHARS,
            "max_output_tokens": DEFAULT_MAX_OUTPUT_TOKENS,
        },
        "logging": {"level": _DEFAULT_LOG_LEVEL},
    }


def _config_file_path(
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    layout: workspace_mod.WorkspaceLayout,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    from_env = (env_map.get(CONFIG_ENV) or "").strip()
    if from_env:
        return Path(from_env).expanduser()
    return layout.path_for("config") / CONFIG_FILENAME


def _resolve_output_dir(
    candidate: Optional[Path], layout: workspace_mod.WorkspaceLayout
) -> Path:
    if candidate is None:
        return layout.path_for("converted")
    candidate = candidate.expanduser()
    if not candidate.is_absolute():
        return (layout.home / candidate).resolve()
    return candidate.resolve()


def _env_value(
    env_map: Mapping[str, str],
    key: str,
    parse: Callable[[Any, str], Any],
) -> Any:
    name = f"{ENV_PREFIX}{key}"
    raw = (env_map.get(name) or "").strip()
    if not raw:
        return None
    return parse(raw, name)


def _to_path(value: Any, label: str) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConvertConfigError(f"{label} must be a string when provided.")
    stripped = value.strip()
    return Path(stripped) if stripped else None


def _to_collision(value: Any, label: str) -> CollisionPolicy:
    if not isinstance(value, str):
        raise ConvertConfigError(
            f"{label} must be one of: skip, overwrite, version."
        )
    return CollisionPolicy.from_value(value)


def _to_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConvertConfigError(f"{label} must be a non-empty string.")
    return value.strip()


def _to_positive_number(value: Any, label: str) -> float:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError as exc:
            raise ConvertConfigError(f"{label} must be a number.") from exc
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConvertConfigError(f"{label} must be a number.")
    if value <= 0:
        raise ConvertConfigError(f"{label} must be greater than zero.")
    return value


def _to_temperature(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConvertConfigError(f"{label} must be a number.")
    if not 0 <= value <= 2:
        raise ConvertConfigError(f"{label} must be between 0 and 2.")
    return float(value)


def _first(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "CollisionPolicy",
    "ConfigOverrides",
    "ConvertConfig",
    "ConvertConfigError",
    "LoadResult",
    "load_config",
]
