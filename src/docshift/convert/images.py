"""Local raster-to-raster transcoding."""

from __future__ import annotations

from .capabilities import ImageCodec
from .errors import EncodeError, UnsupportedPathError
from .formats import FormatSpecifier, is_image, supports_transparency

JPEG_QUALITY = 95
OPAQUE_BACKGROUND = "white"


def transcode_image(
    data: bytes,
    target: FormatSpecifier,
    *,
    codec: ImageCodec,
    quality: int = JPEG_QUALITY,
) -> bytes:
    """Re-encode ``data`` as ``target`` at the source's native pixel size.

    Targets without an alpha channel are composited onto white first.
    """

    if not is_image(target):
        raise UnsupportedPathError(
            f"Image transcoding cannot produce {target.value}."
        )
    image = codec.decode(data)
    background = None if supports_transparency(target) else OPAQUE_BACKGROUND
    try:
        surface = codec.compose(image, background=background)
    except (ValueError, OSError) as exc:
        raise EncodeError(f"Could not prepare image surface: {exc}") from exc
    return codec.encode(surface, target.value, quality=quality)


__all__ = ["JPEG_QUALITY", "OPAQUE_BACKGROUND", "transcode_image"]
