"""DOCX writer for the questionnaire document model (python-docx).

Converts a `census_service.models.document.Document` into `.docx` bytes.
Cell borders, shading and margins have no python-docx API and are written as
raw `w:tcBorders`, `w:shd` and `w:tcMar` elements.
"""

from __future__ import annotations

import io
import logging
import re

import docx
from docx.enum.section import WD_SECTION
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor, Twips

from census_service.logic.docx_validation import is_valid_docx
from census_service.logic.errors import SerializationError
from census_service.models.document import (
    Alignment,
    Cell,
    CellBorders,
    CellMargins,
    Document,
    Paragraph,
    Run,
    Table,
)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

logger = logging.getLogger(__name__)

_ALIGNMENT = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
}


def _set_run_font(run, font_name: str) -> None:
    run.font.name = font_name
    rFonts = run._element.get_or_add_rPr().get_or_add_rFonts()
    for attr in ("w:ascii", "w:hAnsi", "w:eastAsia", "w:cs"):
        rFonts.set(qn(attr), font_name)


# Control characters XML 1.0 cannot carry
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _write_run(par, model: Run) -> None:
    r = par.add_run(_XML_ILLEGAL.sub("", model.text))
    _set_run_font(r, model.font)
    r.font.size = Pt(model.size / 2)
    r.bold = bool(model.bold)
    if model.color:
        r.font.color.rgb = RGBColor.from_string(model.color)


def _write_paragraph(par, model: Paragraph) -> None:
    par.alignment = _ALIGNMENT.get(model.alignment, WD_ALIGN_PARAGRAPH.LEFT)
    par.paragraph_format.space_before = Twips(model.spacing_before)
    par.paragraph_format.space_after = Twips(model.spacing_after)
    for r in model.runs:
        _write_run(par, r)


def _tc_pr(cell):
    return cell._tc.get_or_add_tcPr()


# w:tcPr children must appear in schema order
_TCPR_ORDER = (
    "w:tcW", "w:gridSpan", "w:vMerge", "w:tcBorders", "w:shd", "w:noWrap", "w:tcMar",
    "w:textDirection", "w:tcFitText", "w:vAlign", "w:hideMark",
)


def _get_or_insert(tcPr, tag: str):
    elt = tcPr.find(qn(tag))
    if elt is None:
        elt = OxmlElement(tag)
        successors = _TCPR_ORDER[_TCPR_ORDER.index(tag) + 1:]
        tcPr.insert_element_before(elt, *successors)
    return elt


def _set_cell_borders(cell, borders: CellBorders) -> None:
    tcBorders = _get_or_insert(_tc_pr(cell), "w:tcBorders")
    for tag in ("top", "left", "bottom", "right"):
        border = getattr(borders, tag)
        edge = tcBorders.find(qn(f"w:{tag}"))
        if edge is None:
            edge = OxmlElement(f"w:{tag}")
            tcBorders.append(edge)
        edge.set(qn("w:val"), border.style)
        edge.set(qn("w:sz"), str(border.size))
        edge.set(qn("w:color"), border.color)


def _set_cell_shading(cell, fill: str) -> None:
    shd = _get_or_insert(_tc_pr(cell), "w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)


def _set_cell_margins(cell, margins: CellMargins) -> None:
    tcMar = _get_or_insert(_tc_pr(cell), "w:tcMar")
    for side, val in (("top", margins.top), ("start", margins.left), ("bottom", margins.bottom), ("end", margins.right)):
        elt = tcMar.find(qn(f"w:{side}"))
        if elt is None:
            elt = OxmlElement(f"w:{side}")
            tcMar.append(elt)
        elt.set(qn("w:w"), str(val))
        elt.set(qn("w:type"), "dxa")


def _write_cell(docx_cell, model: Cell) -> None:
    docx_cell.width = Twips(model.width)
    docx_cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.TOP
    _set_cell_borders(docx_cell, model.borders)
    _set_cell_margins(docx_cell, model.margins)
    if model.shading:
        _set_cell_shading(docx_cell, model.shading)
    # A fresh cell already holds one empty paragraph
    for i, para in enumerate(model.blocks or [Paragraph()]):
        target = docx_cell.paragraphs[0] if i == 0 else docx_cell.add_paragraph()
        _write_paragraph(target, para)


def _write_table(doc, model: Table) -> None:
    ncols = max(1, len(model.column_widths))
    tbl = doc.add_table(rows=len(model.rows), cols=ncols)
    tbl.autofit = False
    for col, width in zip(tbl.columns, model.column_widths):
        col.width = Twips(width)
    for r_idx, row_model in enumerate(model.rows):
        docx_row = tbl.rows[r_idx]
        col = 0
        for cell_model in row_model.cells:
            if col >= ncols:
                break
            span = max(1, min(cell_model.column_span, ncols - col))
            target = docx_row.cells[col]
            if span > 1:
                target = target.merge(docx_row.cells[col + span - 1])
            _write_cell(target, cell_model)
            col += span


def _apply_page(section, page) -> None:
    section.page_width = Twips(page.width)
    section.page_height = Twips(page.height)
    section.top_margin = Twips(page.margin_top)
    section.bottom_margin = Twips(page.margin_bottom)
    section.left_margin = Twips(page.margin_left)
    section.right_margin = Twips(page.margin_right)


def _render(model: Document) -> bytes:
    doc = docx.Document()
    if model.title:
        doc.core_properties.title = model.title
    for idx, section in enumerate(model.sections):
        docx_section = doc.sections[0] if idx == 0 else doc.add_section(WD_SECTION.NEW_PAGE)
        _apply_page(docx_section, section.page)
        for block in section.blocks:
            if isinstance(block, Table):
                _write_table(doc, block)
            else:
                _write_paragraph(doc.add_paragraph(), block)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def serialize(model: Document) -> bytes:
    """Return `.docx` bytes for `model`; any writer failure is a SerializationError."""
    try:
        data = _render(model)
    except Exception as exc:
        logger.error("docx_writer.failed title=%s", model.title, exc_info=True)
        raise SerializationError(f"document serialization failed: {exc}") from exc
    if not is_valid_docx(data):
        raise SerializationError("document writer produced a non-DOCX payload")
    return data


__all__ = ["DOCX_MEDIA_TYPE", "serialize"]
