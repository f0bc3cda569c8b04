"""Document writer: serializes a rendered deck to .pptx with python-pptx.

Every slide uses the blank layout; all content is drawn as free-standing
text boxes, auto shapes, connectors and tables at the positions computed by
the slide builders. The file is written next to its destination under a
temporary name and moved into place once complete.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Union

from loguru import logger
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE, MSO_CONNECTOR
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from .errors import SerializationError
from .model import RenderedSlide, ShapeElement, TableElement, TextElement

if TYPE_CHECKING:
    from .builder import Deck

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

_ALIGN = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}

_ANCHOR = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

_SHAPES = {
    "rect": MSO_AUTO_SHAPE_TYPE.RECTANGLE,
    "ellipse": MSO_AUTO_SHAPE_TYPE.OVAL,
}


def _rgb(hex_value: str) -> RGBColor:
    return RGBColor.from_string(hex_value)


class PptxWriter:
    """Turn :class:`RenderedSlide` objects into a python-pptx presentation."""

    BLANK_LAYOUT = 6

    def build(self, deck: "Deck"):
        page = deck.theme.page
        prs = Presentation()
        prs.slide_width = Inches(page.width)
        prs.slide_height = Inches(page.height)
        for rendered in deck:
            self._add_slide(prs, rendered)
        return prs

    def serialize(self, deck: "Deck", destination: Union[str, Path]) -> int:
        """Write *deck* to *destination* and return the file size in bytes.

        Raises :class:`SerializationError` on any failure; no file is left at
        *destination* or at the temporary path in that case.
        """
        destination = Path(destination)
        tmp = destination.with_name(f".{destination.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            prs = self.build(deck)
            with tmp.open("wb") as fh:
                prs.save(fh)
            os.replace(tmp, destination)
        except Exception as exc:
            tmp.unlink(missing_ok=True)
            logger.error("Failed to write {path}: {error}", path=destination, error=exc)
            raise SerializationError(str(destination), exc) from exc
        return destination.stat().st_size

    # --- drawing ----------------------------------------------------------

    def _add_slide(self, prs, rendered: RenderedSlide) -> None:
        layouts = prs.slide_layouts
        layout = layouts[self.BLANK_LAYOUT] if len(layouts) > self.BLANK_LAYOUT else layouts[-1]
        slide = prs.slides.add_slide(layout)
        if rendered.background:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = _rgb(rendered.background)

        for element in rendered.elements:
            if isinstance(element, TextElement):
                self._add_text(slide, element)
            elif isinstance(element, ShapeElement):
                self._add_shape(slide, element)
            elif isinstance(element, TableElement):
                self._add_table(slide, element)
            else:
                raise TypeError(f"Unsupported slide element: {type(element).__name__}")

    def _style_run(self, run, *, size: float, color: str, font: str, bold: bool, char_spacing: float = 0.0) -> None:
        run.font.size = Pt(size)
        run.font.bold = bold
        if font:
            run.font.name = font
        run.font.color.rgb = _rgb(color)
        if char_spacing:
            # python-pptx has no API for letter spacing; spc is in 1/100 pt.
            run._r.get_or_add_rPr().set("spc", str(int(char_spacing * 100)))

    def _add_text(self, slide, element: TextElement) -> None:
        box = element.box
        shape = slide.shapes.add_textbox(Inches(box.x), Inches(box.y), Inches(box.w), Inches(max(box.h, 0.1)))
        tf = shape.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = _ANCHOR.get(element.valign, MSO_ANCHOR.TOP)
        for i, line in enumerate(element.text.split("\n")):
            paragraph = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
            paragraph.alignment = _ALIGN.get(element.align, PP_ALIGN.LEFT)
            run = paragraph.add_run()
            run.text = line
            self._style_run(
                run,
                size=element.size,
                color=element.color,
                font=element.font,
                bold=element.bold,
                char_spacing=element.char_spacing,
            )

    def _add_shape(self, slide, element: ShapeElement) -> None:
        box = element.box
        if element.kind == "line":
            connector = slide.shapes.add_connector(
                MSO_CONNECTOR.STRAIGHT,
                Inches(box.x),
                Inches(box.y),
                Inches(box.right),
                Inches(box.bottom),
            )
            if element.line:
                connector.line.color.rgb = _rgb(element.line)
            connector.line.width = Pt(element.line_width or 1)
            return

        shape = slide.shapes.add_shape(_SHAPES[element.kind], Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h))
        shape.shadow.inherit = False
        if element.fill:
            shape.fill.solid()
            shape.fill.fore_color.rgb = _rgb(element.fill)
            if element.transparency:
                self._set_alpha(shape, element.transparency)
        else:
            shape.fill.background()
        if element.line:
            shape.line.color.rgb = _rgb(element.line)
            shape.line.width = Pt(element.line_width or 1)
        else:
            shape.line.fill.background()

    def _set_alpha(self, shape, transparency: float) -> None:
        srgb = shape._element.spPr.find(qn("a:solidFill")).find(qn("a:srgbClr"))
        alpha = srgb.makeelement(qn("a:alpha"), {"val": str(int((1 - transparency) * 100000))})
        srgb.append(alpha)

    def _add_table(self, slide, element: TableElement) -> None:
        box = element.box
        n_rows = len(element.rows)
        n_cols = len(element.column_widths)
        frame = slide.shapes.add_table(n_rows, n_cols, Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h))
        table = frame.table
        for c, width in enumerate(element.column_widths):
            table.columns[c].width = Inches(width)
        for r in range(n_rows):
            table.rows[r].height = Inches(element.row_height)

        for r, row in enumerate(element.rows):
            for c, rendered in enumerate(row):
                cell = table.cell(r, c)
                cell.fill.solid()
                cell.fill.fore_color.rgb = _rgb(rendered.fill)
                cell.vertical_anchor = MSO_ANCHOR.MIDDLE
                paragraph = cell.text_frame.paragraphs[0]
                paragraph.alignment = _ALIGN.get(element.align, PP_ALIGN.CENTER)
                run = paragraph.add_run()
                run.text = rendered.text
                self._style_run(run, size=element.size, color=rendered.color, font=rendered.font, bold=rendered.bold)
