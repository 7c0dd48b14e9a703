"""AI-assisted reconstruction for pairs no local transcoder handles.

A conversion runs in three phases: build a prompt whose output-shape contract
is chosen by the target format, send a single chat-completion request, then
repair the reply into something the binary synthesizers can always
materialize. Shape mismatches never fail the conversion; transport and
service failures do.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence

import openai

from docshift.core.ai import ClientUnavailableError, load_client
from docshift.core.credentials import (
    API_KEY_NAME,
    CredentialError,
    CredentialStore,
)

from . import synthesize
from .capabilities import Capabilities
from .errors import (
    AuthError,
    DependencyError,
    NetworkError,
    ServiceError,
)
from .extract import extract_text
from .formats import FormatSpecifier, is_ai_native, is_image
from .models import Cell, ConversionRequest, ConversionResult, Slide, StructuredTable

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_INPUT_CHARS = 30_000
DEFAULT_MAX_OUTPUT_TOKENS = 4096

INLINE_INSTRUCTION = "Extract the full content."
SLIDE_ERROR_TITLE = "Conversion Error"
SLIDE_ERROR_PREFIX = "Could not structure content for slides. Raw text: \n"
SLIDE_ERROR_EXCERPT = 500

_BASE_INSTRUCTION = "You are a file converter."
_SLIDES_INSTRUCTION = (
    " Summarize the content into a presentation. Strictly output a JSON array"
    ' of objects, where each object represents a slide and has exactly two'
    ' keys: "title" (string) and "text" (string). Example: [{"title":'
    ' "Intro", "text": "Hello"}]. Do not include Markdown formatting or code'
    " blocks. Pure JSON only."
)
_TABLE_INSTRUCTION = (
    " Extract the data into a structure suitable for a spreadsheet. Strictly"
    " output a JSON Two-Dimensional Array (Array of Arrays), where the first"
    ' inner array is the header. Example: [["Name", "Age"], ["Alice", "30"]].'
    " Do not include Markdown formatting or code blocks. Pure JSON only."
)
_PDF_HINT = " Output as plain text, maintaining layout."
_DOCX_HINT = " Output as plain text, preserving paragraphs."
_DIRECT_HINT = " Output the content directly."

_LEADING_FENCE_RE = re.compile(r"^```[a-z]*\n", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n```$")

ClientFactory = Callable[[str], Any]


class OutputContract(Enum):
    """Shape the model is instructed to reply in."""

    SLIDES = "slides"
    TABLE = "table"
    TEXT = "text"

    @classmethod
    def for_target(cls, target: FormatSpecifier) -> "OutputContract":
        if target is FormatSpecifier.PPTX:
            return cls.SLIDES
        if target is FormatSpecifier.XLSX:
            return cls.TABLE
        return cls.TEXT


@dataclass(frozen=True)
class AISettings:
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_input_chars: int = DEFAULT_MAX_INPUT_CHARS
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS


def convert_with_ai(
    request: ConversionRequest,
    *,
    credentials: CredentialStore,
    capabilities: Capabilities,
    settings: Optional[AISettings] = None,
    client_factory: Optional[ClientFactory] = None,
    logger: Optional[logging.Logger] = None,
) -> ConversionResult:
    """Reconstruct ``request`` in its target format with the remote model."""

    settings = settings or AISettings()
    log = logger or logging.getLogger(__name__)

    try:
        api_key = credentials.get(API_KEY_NAME)
    except CredentialError as exc:
        raise AuthError(f"Could not read saved API key: {exc}") from exc
    if not api_key:
        raise AuthError(
            f"API key required. Set {API_KEY_NAME} or run `docshift key set`."
        )

    contract = OutputContract.for_target(request.target)
    messages = build_messages(
        request,
        contract=contract,
        capabilities=capabilities,
        max_input_chars=settings.max_input_chars,
    )
    log.info(
        "Requesting AI conversion",
        extra={
            "source": request.source.value,
            "target": request.target.value,
            "contract": contract.value,
            "model": settings.model,
            "inline": is_ai_native(request.source),
        },
    )

    factory = client_factory or load_client
    try:
        client = factory(api_key)
    except ClientUnavailableError as exc:
        raise DependencyError(str(exc)) from exc

    reply = strip_code_fences(_complete(client, messages, settings))
    log.debug(
        "AI reply received",
        extra={"contract": contract.value, "chars": len(reply)},
    )
    data = materialize(
        reply,
        request.target,
        contract=contract,
        capabilities=capabilities,
        logger=log,
    )
    return ConversionResult(
        data=data,
        media_type=request.target.media_type,
        filename=request.output_filename(),
    )


def system_instruction(target: FormatSpecifier) -> str:
    contract = OutputContract.for_target(target)
    if contract is OutputContract.SLIDES:
        return _BASE_INSTRUCTION + _SLIDES_INSTRUCTION
    if contract is OutputContract.TABLE:
        return _BASE_INSTRUCTION + _TABLE_INSTRUCTION
    if target is FormatSpecifier.PDF:
        return _BASE_INSTRUCTION + _PDF_HINT
    if target is FormatSpecifier.DOCX:
        return _BASE_INSTRUCTION + _DOCX_HINT
    return _BASE_INSTRUCTION + _DIRECT_HINT


def build_messages(
    request: ConversionRequest,
    *,
    contract: OutputContract,
    capabilities: Capabilities,
    max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
) -> List[Mapping[str, Any]]:
    """Return chat messages carrying the source either inline or as text."""

    if is_ai_native(request.source):
        user_content: Any = [
            _inline_part(request),
            {"type": "text", "text": INLINE_INSTRUCTION},
        ]
    else:
        text = extract_text(
            request.data,
            request.source,
            filename=request.filename,
            capabilities=capabilities,
        )
        user_content = "Content:\n" + text[:max_input_chars]
    return [
        {"role": "system", "content": system_instruction(request.target)},
        {"role": "user", "content": user_content},
    ]


def _inline_part(request: ConversionRequest) -> Mapping[str, Any]:
    encoded = base64.b64encode(request.data).decode("ascii")
    data_url = f"data:{request.source.media_type};base64,{encoded}"
    if is_image(request.source):
        return {"type": "image_url", "image_url": {"url": data_url}}
    return {
        "type": "file",
        "file": {
            "filename": request.filename or "document.pdf",
            "file_data": data_url,
        },
    }


def _complete(
    client: Any,
    messages: Sequence[Mapping[str, Any]],
    settings: AISettings,
) -> str:
    params: dict[str, Any] = {
        "model": settings.model,
        "messages": [dict(message) for message in messages],
        "temperature": settings.temperature,
    }
    if "gpt-5" in settings.model:
        params["max_completion_tokens"] = settings.max_output_tokens
    else:
        params["max_tokens"] = settings.max_output_tokens

    try:
        response = client.chat.completions.create(**params)
    except openai.APIConnectionError as exc:
        raise NetworkError(f"Could not reach the AI service: {exc}") from exc
    except openai.OpenAIError as exc:
        raise ServiceError(f"AI service request failed: {exc}") from exc

    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def strip_code_fences(text: str) -> str:
    text = _LEADING_FENCE_RE.sub("", text)
    return _TRAILING_FENCE_RE.sub("", text).strip()


def parse_slide_plan(text: str) -> tuple[List[Slide], bool]:
    """Return ``(slides, repaired)``; unusable replies become an error slide."""

    try:
        payload = json.loads(text)
    except (ValueError, RecursionError):
        payload = None
    if not isinstance(payload, list):
        excerpt = SLIDE_ERROR_PREFIX + text[:SLIDE_ERROR_EXCERPT]
        return [Slide(title=SLIDE_ERROR_TITLE, text=excerpt)], True
    return [_slide_from_item(item) for item in payload], False


def _slide_from_item(item: Any) -> Slide:
    if isinstance(item, Mapping):
        return Slide(
            title=_as_text(item.get("title")),
            text=_as_text(item.get("text")),
        )
    return Slide(title="", text=_as_text(item))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def parse_table(text: str) -> tuple[StructuredTable, bool]:
    """Return ``(rows, repaired)``; non-grid replies are split on lines/commas."""

    try:
        payload = json.loads(text)
    except (ValueError, RecursionError):
        payload = None
    if isinstance(payload, list) and payload and isinstance(payload[0], list):
        rows = [
            [_table_cell(value) for value in row]
            if isinstance(row, list)
            else [_table_cell(row)]
            for row in payload
        ]
        return rows, False
    fallback: StructuredTable = [
        list(line.split(",")) for line in text.split("\n")
    ]
    return fallback, True


def _table_cell(value: Any) -> Cell:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return json.dumps(value, ensure_ascii=False)


def materialize(
    text: str,
    target: FormatSpecifier,
    *,
    contract: OutputContract,
    capabilities: Capabilities,
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """Turn a repaired reply into bytes of ``target``."""

    log = logger or logging.getLogger(__name__)
    if contract is OutputContract.SLIDES:
        slides, repaired = parse_slide_plan(text)
        if repaired:
            log.warning(
                "Slide reply was not a JSON array; using error deck",
                extra={"chars": len(text)},
            )
        return synthesize.slides_to_pptx(slides, capabilities=capabilities)
    if contract is OutputContract.TABLE:
        rows, repaired = parse_table(text)
        if repaired:
            log.warning(
                "Table reply was not a JSON grid; splitting lines",
                extra={"rows": len(rows)},
            )
        return synthesize.table_to_xlsx(rows, capabilities=capabilities)
    if target is FormatSpecifier.PDF:
        return synthesize.text_to_pdf(text, capabilities=capabilities)
    if target is FormatSpecifier.DOCX:
        return synthesize.text_to_docx(text, capabilities=capabilities)
    if is_image(target):
        return synthesize.text_to_image(
            text, target.media_type, capabilities=capabilities
        )
    return text.encode("utf-8")


__all__ = [
    "AISettings",
    "ClientFactory",
    "DEFAULT_MODEL",
    "INLINE_INSTRUCTION",
    "OutputContract",
    "SLIDE_ERROR_TITLE",
    "build_messages",
    "convert_with_ai",
    "materialize",
    "parse_slide_plan",
    "parse_table",
    "strip_code_fences",
    "system_instruction",
]
