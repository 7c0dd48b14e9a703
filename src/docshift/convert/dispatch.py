"""Route a conversion request to the transcoder able to fulfil it."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from docshift.core.credentials import CredentialStore, EnvCredentialStore

from .ai import AISettings, ClientFactory, convert_with_ai
from .capabilities import Capabilities, default_capabilities
from .errors import ResourceLimitError
from .formats import FormatSpecifier, is_image, is_structured_data, resolve_format
from .images import transcode_image
from .models import ConversionRequest, ConversionResult
from .tabular import transcode_structured

MEGABYTE = 1024 * 1024
DEFAULT_MAX_INPUT_BYTES = 100 * MEGABYTE


class Route(Enum):
    IMAGE = "image"
    STRUCTURED = "structured"
    AI = "ai"


def choose_route(source: FormatSpecifier, target: FormatSpecifier) -> Route:
    """First match wins: image pair, then structured-data pair, then AI."""

    if is_image(source) and is_image(target):
        return Route.IMAGE
    if is_structured_data(source) and is_structured_data(target):
        return Route.STRUCTURED
    return Route.AI


def convert(
    request: ConversionRequest,
    *,
    capabilities: Optional[Capabilities] = None,
    credentials: Optional[CredentialStore] = None,
    settings: Optional[AISettings] = None,
    client_factory: Optional[ClientFactory] = None,
    max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Convert ``request`` and return the produced file.

    The registry's allowed-target table is not consulted here; any pair the
    routes can materialize is attempted.
    """

    log = logger or logging.getLogger(__name__)
    if request.size > max_input_bytes:
        raise ResourceLimitError(
            "Input is {0:.1f} MB; the limit is {1:.0f} MB.".format(
                request.size / MEGABYTE, max_input_bytes / MEGABYTE
            )
        )

    caps = capabilities or default_capabilities()
    route = choose_route(request.source, request.target)
    log.info(
        "Dispatching conversion",
        extra={
            "route": route.value,
            "source": request.source.value,
            "target": request.target.value,
            "bytes": request.size,
        },
    )

    if route is Route.IMAGE:
        data = transcode_image(request.data, request.target, codec=caps.images)
    elif route is Route.STRUCTURED:
        data = transcode_structured(
            request.data,
            request.source,
            request.target,
            codec=caps.spreadsheets,
        )
    else:
        return convert_with_ai(
            request,
            credentials=credentials or EnvCredentialStore(),
            capabilities=caps,
            settings=settings,
            client_factory=client_factory,
            logger=log,
        )

    return ConversionResult(
        data=data,
        media_type=request.target.media_type,
        filename=request.output_filename(),
    )


def convert_bytes(
    data: bytes,
    source_type: str,
    filename: str,
    target_type: str,
    **options,
) -> ConversionResult:
    """Resolve raw media-type strings, then :func:`convert`.

    ``source_type`` may be empty, in which case the file name decides.
    """

    request = ConversionRequest(
        data=data,
        source=resolve_format(source_type, filename),
        filename=filename,
        target=resolve_format(target_type),
    )
    return convert(request, **options)


__all__ = [
    "DEFAULT_MAX_INPUT_BYTES",
    "Route",
    "choose_route",
    "convert",
    "convert_bytes",
]
