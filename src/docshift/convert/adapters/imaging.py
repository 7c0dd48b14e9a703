"""Pillow-backed raster codec."""

from __future__ import annotations

import io
from functools import cached_property
from types import ModuleType
from typing import Any, Optional, Sequence

from ..capabilities import import_capability
from ..errors import DecodeError, EncodeError

_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

_PAGE_SIZE = (1240, 1754)  # A4 at 150 dpi
_MARGIN = 60
_LINE_HEIGHT = 22


class PillowImageCodec:
    """Decode, flatten, and encode raster images with Pillow."""

    @cached_property
    def _image(self) -> ModuleType:
        return import_capability("PIL.Image", "open")

    @cached_property
    def _draw(self) -> ModuleType:
        return import_capability("PIL.ImageDraw", "Draw")

    @cached_property
    def _fonts(self) -> ModuleType:
        return import_capability("PIL.ImageFont", "load_default")

    def decode(self, data: bytes) -> Any:
        image_mod = self._image
        try:
            image = image_mod.open(io.BytesIO(data))
            image.load()
        except (OSError, ValueError, image_mod.DecompressionBombError) as exc:
            raise DecodeError("Failed to load image.") from exc
        return image

    def compose(self, image: Any, *, background: Optional[str]) -> Any:
        """Draw ``image`` onto a fresh surface of the same pixel size.

        With a ``background`` the surface starts opaque and the result is
        flattened to RGB; without one the surface is fully transparent.
        """

        image_mod = self._image
        rgba = image.convert("RGBA")
        fill = background if background is not None else (0, 0, 0, 0)
        surface = image_mod.new("RGBA", rgba.size, fill)
        surface.alpha_composite(rgba)
        if background is not None:
            return surface.convert("RGB")
        return surface

    def encode(self, image: Any, media_type: str, *, quality: int) -> bytes:
        pil_format = _PIL_FORMATS.get(media_type)
        if pil_format is None:
            raise EncodeError(f"No image encoder available for {media_type}.")
        buffer = io.BytesIO()
        try:
            image.save(buffer, format=pil_format, quality=quality)
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError(
                f"Image encoder failed for {media_type}: {exc}"
            ) from exc
        return buffer.getvalue()

    def render_text(self, lines: Sequence[str]) -> Any:
        """Render ``lines`` top to bottom on a white page-sized canvas."""

        width, min_height = _PAGE_SIZE
        needed = 2 * _MARGIN + _LINE_HEIGHT * max(len(lines), 1)
        canvas = self._image.new("RGB", (width, max(min_height, needed)), "white")
        draw = self._draw.Draw(canvas)
        font = self._fonts.load_default()
        y = _MARGIN
        for line in lines:
            draw.text((_MARGIN, y), line, fill="black", font=font)
            y += _LINE_HEIGHT
        return canvas


__all__ = ["PillowImageCodec"]
