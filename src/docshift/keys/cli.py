"""``docshift key``: manage the persisted API key."""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path
from typing import Optional, Sequence

from docshift.core import workspace as workspace_mod
from docshift.core.credentials import (
    API_KEY_NAME,
    CREDENTIALS_FILENAME,
    CredentialError,
    EnvCredentialStore,
    FileCredentialStore,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docshift key",
        description=(
            f"Store, clear, or inspect the API key. {API_KEY_NAME} in the "
            "environment (or a .env file) always takes precedence."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root holding the credentials file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser(
        "set",
        help="Save a key (prompted, or read from stdin when piped).",
    )
    subparsers.add_parser("clear", help="Remove the saved key.")
    subparsers.add_parser("status", help="Show where the active key comes from.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    store = FileCredentialStore(layout.path_for("config") / CREDENTIALS_FILENAME)

    try:
        if args.command == "set":
            return _handle_set(store)
        if args.command == "clear":
            return _handle_clear(store)
        return _handle_status(store)
    except CredentialError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1


def _handle_set(store: FileCredentialStore) -> int:
    value = _read_secret()
    if not value:
        sys.stderr.write("error: no key provided.\n")
        return 1
    store.set(API_KEY_NAME, value)
    sys.stdout.write(f"Saved key to {store.path}\n")
    return 0


def _handle_clear(store: FileCredentialStore) -> int:
    if store.delete(API_KEY_NAME):
        sys.stdout.write("Removed saved key.\n")
    else:
        sys.stdout.write("No saved key to remove.\n")
    return 0


def _handle_status(store: FileCredentialStore) -> int:
    from_env = EnvCredentialStore().get(API_KEY_NAME)
    saved = store.get(API_KEY_NAME)
    if from_env:
        sys.stdout.write(f"Active key: {mask_secret(from_env)} (environment)\n")
    elif saved:
        sys.stdout.write(f"Active key: {mask_secret(saved)} ({store.path})\n")
    else:
        sys.stdout.write(
            f"No key configured. Set {API_KEY_NAME} or run `docshift key set`.\n"
        )
        return 1
    return 0


def _read_secret() -> Optional[str]:
    if sys.stdin is not None and not sys.stdin.isatty():
        return sys.stdin.readline().strip() or None
    return getpass.getpass("API key: ").strip() or None


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:3]}...{value[-4:]}"


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
