"""Shared infrastructure for docshift commands."""

from __future__ import annotations

from .ai import ClientUnavailableError, load_client
from .config import (
    ConfigFileError,
    dump_toml_table,
    load_toml,
    merge_defaults,
    write_private_text,
)
from .config_templates import (
    ConfigTemplate,
    ConfigTemplateError,
    get_template,
    iter_templates,
)
from .credentials import (
    ChainedCredentialStore,
    CredentialError,
    CredentialStore,
    EnvCredentialStore,
    FileCredentialStore,
    default_credential_store,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "ChainedCredentialStore",
    "ClientUnavailableError",
    "ConfigFileError",
    "ConfigTemplate",
    "ConfigTemplateError",
    "CredentialError",
    "CredentialStore",
    "EnvCredentialStore",
    "FileCredentialStore",
    "JsonLogFormatter",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "configure_logger",
    "default_credential_store",
    "dump_toml_table",
    "ensure_workspace",
    "get_template",
    "iter_templates",
    "load_client",
    "load_toml",
    "merge_defaults",
    "write_private_text",
]
