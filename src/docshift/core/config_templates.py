"""Packaged configuration templates."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable

from .config import ConfigFileError, write_private_text

__all__ = [
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
]


class ConfigTemplateError(RuntimeError):
    """Raised when a configuration template is unknown or cannot be written."""


@dataclass(frozen=True)
class ConfigTemplate:
    name: str
    package: str
    resource: str
    filename: str
    description: str

    def read_text(self) -> str:
        try:
            return (
                resources.files(self.package)
                .joinpath(self.resource)
                .read_text(encoding="utf-8")
            )
        except (FileNotFoundError, ModuleNotFoundError) as exc:
            raise ConfigTemplateError(
                f"Template '{self.name}' is missing from {self.package}."
            ) from exc

    def write(self, config_dir: Path, *, overwrite: bool = False) -> Path:
        """Write the template as ``config_dir / filename`` with mode 0600."""

        try:
            return write_private_text(
                config_dir / self.filename,
                text=self.read_text(),
                overwrite=overwrite,
            )
        except ConfigFileError as exc:
            raise ConfigTemplateError(str(exc)) from exc


_TEMPLATES = {
    "convert": ConfigTemplate(
        name="convert",
        package="docshift.convert",
        resource="template.toml",
        filename="convert.toml",
        description="Defaults for output placement, limits, and the AI model.",
    ),
}


def get_template(name: str) -> ConfigTemplate:
    try:
        return _TEMPLATES[name]
    except KeyError as exc:
        raise ConfigTemplateError(f"Unknown config template '{name}'.") from exc


def iter_templates() -> Iterable[ConfigTemplate]:
    return tuple(_TEMPLATES.values())
