"""JSON-lines logging for docshift commands."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "FALLBACK_LOG_DIRNAME",
    "JsonLogFormatter",
    "configure_logger",
]

FALLBACK_LOG_DIRNAME = "docshift-logs"
_ROLE_ATTR = "_docshift_role"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: _jsonable(value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
) -> tuple[logging.Logger, Path]:
    """Return ``name``'s logger writing JSON lines under ``log_dir``.

    The rotating file handler is installed once per logger and retargeted on
    later calls. ``verbose`` forces DEBUG and mirrors records to stderr.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    filename = f"{name.rsplit('.', 1)[-1]}.log"
    handler, path = _file_handler(logger, log_dir / filename, max_bytes, backup_count)
    handler.setLevel(logging.DEBUG if verbose else _level_from_name(level))
    _set_console(logger, enabled=verbose)
    return logger, path


def _level_from_name(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _file_handler(
    logger: logging.Logger,
    path: Path,
    max_bytes: int,
    backup_count: int,
) -> tuple[RotatingFileHandler, Path]:
    existing = _find_handler(logger, "file")
    if isinstance(existing, RotatingFileHandler):
        if Path(existing.baseFilename) != path:
            existing.close()
            existing.baseFilename = str(_touch_private(path))
        return existing, Path(existing.baseFilename)

    try:
        target = _touch_private(path)
        handler = RotatingFileHandler(
            target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except PermissionError:
        target = _touch_private(
            Path(tempfile.gettempdir()) / FALLBACK_LOG_DIRNAME / path.name
        )
        handler = RotatingFileHandler(
            target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _ROLE_ATTR, "file")
    logger.addHandler(handler)
    return handler, target


def _set_console(logger: logging.Logger, *, enabled: bool) -> None:
    console = _find_handler(logger, "console")
    if enabled and console is None:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(logging.DEBUG)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        setattr(console, _ROLE_ATTR, "console")
        logger.addHandler(console)
    elif not enabled and console is not None:
        logger.removeHandler(console)
        console.close()


def _find_handler(logger: logging.Logger, role: str) -> logging.Handler | None:
    for handler in logger.handlers:
        if getattr(handler, _ROLE_ATTR, None) == role:
            return handler
    return None


def _touch_private(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)
