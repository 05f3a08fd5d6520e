"""Paragraph, cell and table construction helpers for the questionnaire layout.

All tables share a single content-area width budget (`CONTENT_WIDTH`) and
divide it by explicit column fractions.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Any, Iterable, Mapping, Sequence, Union

from census_service.logic.checkbox import resolve
from census_service.models.document import Alignment, Cell, Paragraph, Row, Run, Table

FONT = "Arial"
BASE_SIZE = 18  # 9pt
CONTENT_WIDTH = 9000  # A4 with narrow margins
HEADER_SHADING = "D9D9D9"
MUTED_COLOR = "999999"
BULLET = "■"

HALF = Fraction(1, 2)
THIRD = Fraction(1, 3)

CellContent = Union[str, Paragraph, Sequence[Union[str, Paragraph]]]


def run(text: str, *, bold: bool = False, size: int = BASE_SIZE, color: str | None = None) -> Run:
    return Run(text=text, size=size, bold=bold, color=color, font=FONT)


def paragraph(
    content: Union[str, Run, Iterable[Run]] = "",
    *,
    align: Alignment = Alignment.LEFT,
    before: int = 20,
    after: int = 20,
) -> Paragraph:
    if isinstance(content, str):
        runs = [run(content)]
    elif isinstance(content, Run):
        runs = [content]
    else:
        runs = list(content)
    return Paragraph(runs=runs, alignment=align, spacing_before=before, spacing_after=after)


def bold_paragraph(text: str, **kwargs: Any) -> Paragraph:
    return paragraph([run(text, bold=True)], **kwargs)


def column_widths(*fractions: Fraction, total: int = CONTENT_WIDTH) -> list[int]:
    """Split `total` by `fractions`; the last column absorbs rounding."""
    widths = [int(total * f) for f in fractions[:-1]]
    widths.append(total - sum(widths))
    return widths


def _as_paragraphs(content: CellContent) -> list[Paragraph]:
    if isinstance(content, (str, Paragraph)):
        content = [content]
    return [paragraph(c) if isinstance(c, str) else c for c in content]


def cell(content: CellContent, *, width: int, shading: str | None = None, span: int = 1) -> Cell:
    return Cell(blocks=_as_paragraphs(content), width=width, shading=shading, column_span=span)


def header_row(text: str, *, columns: int = 1, width: int = CONTENT_WIDTH) -> Row:
    """Full-width shaded section header spanning every column."""
    return Row(cells=[cell(bold_paragraph(text), width=width, shading=HEADER_SHADING, span=columns)])


def row(*cells: Cell) -> Row:
    return Row(cells=list(cells))


def table(rows: Sequence[Row], widths: Sequence[int]) -> Table:
    return Table(rows=list(rows), column_widths=list(widths))


def full_width_table(*rows: Row) -> Table:
    return table(rows, [CONTENT_WIDTH])


def full_width_box(content: CellContent, *, shading: str | None = None) -> Table:
    return full_width_table(row(cell(content, width=CONTENT_WIDTH, shading=shading)))


def section_header(text: str) -> Table:
    return full_width_table(header_row(text))


def two_col(left: CellContent, right: CellContent, widths: Sequence[int] | None = None) -> Row:
    lw, rw = widths or column_widths(HALF, HALF)
    return row(cell(left, width=lw), cell(right, width=rw))


def two_col_table(*rows: Row) -> Table:
    return table(rows, column_widths(HALF, HALF))


def option_line(answers: Mapping[str, Any], key: str, option: str) -> Paragraph:
    return paragraph(f"{resolve(answers, key, option).value} {option}", before=10, after=10)


def check_list(answers: Mapping[str, Any], key: str, options: Sequence[str]) -> list[Paragraph]:
    """One paragraph per option, each prefixed with its resolved glyph."""
    return [option_line(answers, key, opt) for opt in options]


def inline_options(answers: Mapping[str, Any], key: str, options: Sequence[str]) -> list[Run]:
    return [run(f"{resolve(answers, key, opt).value} {opt}   ") for opt in options]


def split_columns(items: Sequence[Any], left_count: int | None = None) -> tuple[list[Any], list[Any]]:
    """Split into two columns; the left column takes the ceiling half by default."""
    mid = math.ceil(len(items) / 2) if left_count is None else left_count
    return list(items[:mid]), list(items[mid:])


def two_col_check_table(
    answers: Mapping[str, Any],
    key: str,
    options: Sequence[str],
    *,
    left_count: int | None = None,
) -> Table:
    """Lay options out row by row in two columns; blank cells pad the shorter side."""
    left, right = split_columns(options, left_count)
    rows = []
    for i in range(max(len(left), len(right))):
        rows.append(
            two_col(
                option_line(answers, key, left[i]) if i < len(left) else paragraph(""),
                option_line(answers, key, right[i]) if i < len(right) else paragraph(""),
            )
        )
    return two_col_table(*rows)


__all__ = [
    "FONT",
    "BASE_SIZE",
    "CONTENT_WIDTH",
    "HEADER_SHADING",
    "MUTED_COLOR",
    "BULLET",
    "HALF",
    "THIRD",
    "run",
    "paragraph",
    "bold_paragraph",
    "column_widths",
    "cell",
    "header_row",
    "row",
    "table",
    "full_width_table",
    "full_width_box",
    "section_header",
    "two_col",
    "two_col_table",
    "option_line",
    "check_list",
    "inline_options",
    "split_columns",
    "two_col_check_table",
]
