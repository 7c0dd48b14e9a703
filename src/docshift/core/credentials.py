"""Credential lookup for the remote reasoning service.

Keys are looked up by name across an ordered chain of stores. The process
environment (optionally seeded from a ``.env`` file through python-dotenv)
comes first; a private TOML file inside the workspace ``config`` directory
persists keys saved with ``docshift key set``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, MutableMapping, Optional, Protocol, Sequence

from dotenv import load_dotenv

from . import config as core_config
from .ai import DEFAULT_API_KEY_ENV
from .workspace import WorkspaceLayout

__all__ = [
    "API_KEY_NAME",
    "CREDENTIALS_FILENAME",
    "ChainedCredentialStore",
    "CredentialError",
    "CredentialStore",
    "EnvCredentialStore",
    "FileCredentialStore",
    "default_credential_store",
]

API_KEY_NAME = DEFAULT_API_KEY_ENV
CREDENTIALS_FILENAME = "credentials.toml"
_TABLE = "credentials"


class CredentialError(RuntimeError):
    """Raised when a credential store cannot be read or updated."""


class CredentialStore(Protocol):
    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...

    def delete(self, name: str) -> bool:
        ...


class EnvCredentialStore:
    """Read-only view over environment variables.

    When no explicit mapping is given the process environment is used and a
    ``.env`` file is loaded once, without overriding variables already set.
    """

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        *,
        dotenv_path: Optional[Path] = None,
    ) -> None:
        self._env = env
        self._dotenv_path = dotenv_path
        self._loaded = env is not None

    def get(self, name: str) -> Optional[str]:
        if not self._loaded:
            load_dotenv(dotenv_path=self._dotenv_path, override=False)
            self._loaded = True
        env = os.environ if self._env is None else self._env
        value = (env.get(name) or "").strip()
        return value or None

    def set(self, name: str, value: str) -> None:
        raise CredentialError(
            f"Environment credentials are read-only; export {name} instead."
        )

    def delete(self, name: str) -> bool:
        raise CredentialError(
            f"Environment credentials are read-only; unset {name} instead."
        )


class FileCredentialStore:
    """Persist credentials in a ``[credentials]`` TOML table (mode 0600)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self, name: str) -> Optional[str]:
        value = self._read().get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def set(self, name: str, value: str) -> None:
        cleaned = value.strip()
        if not cleaned:
            raise CredentialError("Refusing to store an empty credential.")
        entries = self._read()
        entries[name] = cleaned
        self._write(entries)

    def delete(self, name: str) -> bool:
        entries = self._read()
        if name not in entries:
            return False
        del entries[name]
        if entries:
            self._write(entries)
        else:
            self.path.unlink()
        return True

    def _read(self) -> MutableMapping[str, str]:
        if not self.path.exists():
            return {}
        try:
            document = core_config.load_toml(self.path)
        except core_config.ConfigFileError as exc:
            raise CredentialError(str(exc)) from exc
        table = document.get(_TABLE, {})
        if not isinstance(table, Mapping):
            raise CredentialError(
                f"Expected a [{_TABLE}] table in {self.path}."
            )
        return {str(key): str(value) for key, value in table.items()}

    def _write(self, entries: Mapping[str, str]) -> None:
        core_config.write_private_text(
            self.path,
            text=core_config.dump_toml_table(_TABLE, entries),
            overwrite=True,
        )


class ChainedCredentialStore:
    """Consult ``stores`` in order; writes go to ``writable``."""

    def __init__(
        self,
        stores: Sequence[CredentialStore],
        *,
        writable: Optional[CredentialStore] = None,
    ) -> None:
        if not stores:
            raise ValueError("At least one credential store is required.")
        self.stores = tuple(stores)
        self.writable = writable

    def get(self, name: str) -> Optional[str]:
        for store in self.stores:
            value = store.get(name)
            if value:
                return value
        return None

    def set(self, name: str, value: str) -> None:
        if self.writable is None:
            raise CredentialError("No writable credential store configured.")
        self.writable.set(name, value)

    def delete(self, name: str) -> bool:
        if self.writable is None:
            raise CredentialError("No writable credential store configured.")
        return self.writable.delete(name)


def default_credential_store(
    layout: WorkspaceLayout,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> ChainedCredentialStore:
    persisted = FileCredentialStore(
        layout.path_for("config") / CREDENTIALS_FILENAME
    )
    return ChainedCredentialStore(
        (EnvCredentialStore(env), persisted), writable=persisted
    )
