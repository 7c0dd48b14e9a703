"""Interactive conversion sessions and the result files they hand out."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .dispatch import convert
from .errors import ConversionError
from .models import ConversionRequest, ConversionResult

Converter = Callable[..., ConversionResult]


@dataclass
class ResultHandle:
    """A conversion result spilled to a temporary file."""

    path: Path
    media_type: str
    filename: str
    size: int
    released: bool = False

    def read_bytes(self) -> bytes:
        if self.released:
            raise ConversionError(f"Result '{self.filename}' was released.")
        return self.path.read_bytes()

    def save_to(self, destination: Path) -> Path:
        if self.released:
            raise ConversionError(f"Result '{self.filename}' was released.")
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.path, destination)
        return destination


class ResultHandleManager:
    """Own the temporary files backing :class:`ResultHandle` objects.

    At most one handle is live; acquiring a new one releases the previous.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        parent = str(directory) if directory is not None else None
        self._root = Path(tempfile.mkdtemp(prefix="docshift-", dir=parent))
        self._current: Optional[ResultHandle] = None

    @property
    def current(self) -> Optional[ResultHandle]:
        return self._current

    @property
    def root(self) -> Path:
        return self._root

    def acquire(self, result: ConversionResult) -> ResultHandle:
        if self._current is not None:
            self.release(self._current)
        handle_file = tempfile.NamedTemporaryFile(
            dir=self._root, suffix=Path(result.filename).suffix, delete=False
        )
        with handle_file:
            handle_file.write(result.data)
        handle = ResultHandle(
            path=Path(handle_file.name),
            media_type=result.media_type,
            filename=result.filename,
            size=len(result.data),
        )
        self._current = handle
        return handle

    def release(self, handle: ResultHandle) -> None:
        if handle.released:
            return
        handle.path.unlink(missing_ok=True)
        handle.released = True
        if self._current is handle:
            self._current = None

    def close(self) -> None:
        if self._current is not None:
            self.release(self._current)
        shutil.rmtree(self._root, ignore_errors=True)


@dataclass
class ConversionSession:
    """Run one conversion at a time and keep only the latest result."""

    converter: Converter = convert
    options: Dict[str, Any] = field(default_factory=dict)
    handles: ResultHandleManager = field(default_factory=ResultHandleManager)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(__name__)
    )
    _busy: bool = field(default=False, init=False, repr=False)

    @property
    def busy(self) -> bool:
        return self._busy

    def run(self, request: ConversionRequest) -> ResultHandle:
        """Convert ``request``; a failure releases any previous result."""

        if self._busy:
            raise ConversionError("A conversion is already in progress.")
        self._busy = True
        try:
            result = self.converter(request, logger=self.logger, **self.options)
        except ConversionError:
            self.reset()
            raise
        finally:
            self._busy = False
        handle = self.handles.acquire(result)
        self.logger.info(
            "Conversion result ready",
            extra={"result_filename": handle.filename, "bytes": handle.size},
        )
        return handle

    def reset(self) -> None:
        if self.handles.current is not None:
            self.handles.release(self.handles.current)

    def close(self) -> None:
        self.handles.close()

    def __enter__(self) -> "ConversionSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["ConversionSession", "ResultHandle", "ResultHandleManager"]
