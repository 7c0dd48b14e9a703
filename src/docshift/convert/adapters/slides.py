"""python-pptx backed slide reader/writer."""

from __future__ import annotations

import io
import zipfile
from functools import cached_property
from types import ModuleType
from typing import Any, Sequence

from ..capabilities import import_capability
from ..errors import EncodeError, ExtractionError
from ..models import Slide

UNTITLED_SLIDE = "Untitled Slide"
PLACEHOLDER_TITLE = "Conversion Result"

_BLANK_LAYOUT = 6
_TITLE_COLOR = "363636"
_BODY_COLOR = "666666"


class PptxSlideCodec:
    """Fixed-position title/body slides, plus plain text extraction."""

    @cached_property
    def _pptx(self) -> ModuleType:
        return import_capability("pptx", "Presentation")

    @cached_property
    def _util(self) -> ModuleType:
        return import_capability("pptx.util", "Inches")

    @cached_property
    def _dml(self) -> ModuleType:
        return import_capability("pptx.dml.color", "RGBColor")

    @cached_property
    def _package_error(self) -> type:
        return import_capability("pptx.exc", "PythonPptxError").PythonPptxError

    @cached_property
    def _text_enum(self) -> ModuleType:
        return import_capability("pptx.enum.text", "MSO_ANCHOR")

    def extract_text(self, data: bytes) -> str:
        try:
            presentation = self._pptx.Presentation(io.BytesIO(data))
        except (
            zipfile.BadZipFile,
            KeyError,
            ValueError,
            OSError,
            self._package_error,
        ) as exc:
            raise ExtractionError("Could not extract text from file.") from exc

        blocks: list[str] = []
        for slide in presentation.slides:
            texts = [
                shape.text_frame.text
                for shape in slide.shapes
                if shape.has_text_frame and shape.text_frame.text.strip()
            ]
            if texts:
                blocks.append("\n".join(texts))
        return "\n\n".join(blocks)

    def write_slides(self, slides: Sequence[Slide]) -> bytes:
        presentation = self._pptx.Presentation()
        layout = presentation.slide_layouts[_BLANK_LAYOUT]
        try:
            for slide in slides:
                page = presentation.slides.add_slide(layout)
                self._add_title(page, presentation, slide.title or UNTITLED_SLIDE)
                self._add_body(page, presentation, slide.text or "")
            if len(presentation.slides) == 0:
                page = presentation.slides.add_slide(layout)
                self._add_placeholder(page)
            buffer = io.BytesIO()
            presentation.save(buffer)
        except (ValueError, OSError) as exc:
            raise EncodeError(f"Failed to write presentation: {exc}") from exc
        return buffer.getvalue()

    def _add_title(self, page: Any, presentation: Any, text: str) -> None:
        Inches, Pt = self._util.Inches, self._util.Pt
        box = page.shapes.add_textbox(
            Inches(0.5),
            Inches(0.5),
            int(presentation.slide_width * 0.9),
            Inches(1),
        )
        frame = box.text_frame
        frame.word_wrap = True
        paragraph = frame.paragraphs[0]
        paragraph.text = text
        paragraph.font.size = Pt(24)
        paragraph.font.bold = True
        paragraph.font.color.rgb = self._dml.RGBColor.from_string(_TITLE_COLOR)

    def _add_body(self, page: Any, presentation: Any, text: str) -> None:
        Inches, Pt = self._util.Inches, self._util.Pt
        box = page.shapes.add_textbox(
            Inches(0.5),
            Inches(1.5),
            int(presentation.slide_width * 0.9),
            Inches(4),
        )
        frame = box.text_frame
        frame.word_wrap = True
        frame.vertical_anchor = self._text_enum.MSO_ANCHOR.TOP
        frame.text = text
        color = self._dml.RGBColor.from_string(_BODY_COLOR)
        for paragraph in frame.paragraphs:
            paragraph.font.size = Pt(14)
            paragraph.font.color.rgb = color

    def _add_placeholder(self, page: Any) -> None:
        Inches, Pt = self._util.Inches, self._util.Pt
        box = page.shapes.add_textbox(Inches(1), Inches(1), Inches(8), Inches(1))
        paragraph = box.text_frame.paragraphs[0]
        paragraph.text = PLACEHOLDER_TITLE
        paragraph.font.size = Pt(18)


__all__ = ["PLACEHOLDER_TITLE", "PptxSlideCodec", "UNTITLED_SLIDE"]
