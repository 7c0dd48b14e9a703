"""OpenAI client construction for AI-assisted conversions."""

from __future__ import annotations

from typing import Any, Optional

try:  # Allow module import even when the OpenAI dependency is absent.
    from openai import OpenAI  # type: ignore
except ImportError:  # pragma: no cover - optional dependency guard
    OpenAI = None  # type: ignore

__all__ = ["ClientUnavailableError", "DEFAULT_API_KEY_ENV", "load_client"]

DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"


class ClientUnavailableError(RuntimeError):
    """Raised when the OpenAI SDK cannot be used to build a client."""


def load_client(api_key: str, *, base_url: Optional[str] = None) -> Any:
    """Initialize an OpenAI client for ``api_key``.

    Retries are disabled; a failed conversion is surfaced to the caller and
    re-initiated by the user.
    """
    if OpenAI is None:
        raise ClientUnavailableError(
            "The 'openai' package is required for AI conversions. "
            "Install it and retry."
        )
    if not api_key:
        raise ClientUnavailableError("An API key is required to create a client.")
    kwargs: dict[str, Any] = {"api_key": api_key, "max_retries": 0}
    if base_url:
        kwargs["base_url"] = base_url
    return OpenAI(**kwargs)
