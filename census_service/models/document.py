"""Serializer-independent document model.

A `Document` is built fresh for every export call and discarded after the
writer turns it into bytes. Sizes follow word-processor units: run sizes in
half-points, widths, spacing and margins in twips (1/20 pt).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union


class Alignment(str, enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Border:
    style: str = "single"
    size: int = 4
    color: str = "000000"


@dataclass(frozen=True)
class CellBorders:
    top: Border = Border()
    bottom: Border = Border()
    left: Border = Border()
    right: Border = Border()


@dataclass(frozen=True)
class CellMargins:
    top: int = 60
    bottom: int = 60
    left: int = 100
    right: int = 100


@dataclass
class Run:
    text: str
    size: int
    bold: bool = False
    color: Optional[str] = None
    font: str = "Arial"


@dataclass
class Paragraph:
    runs: List[Run] = field(default_factory=list)
    alignment: Alignment = Alignment.LEFT
    spacing_before: int = 20
    spacing_after: int = 20

    @property
    def text(self) -> str:
        return "".join(r.text for r in self.runs)


@dataclass
class Cell:
    blocks: List[Paragraph]
    width: int
    borders: CellBorders = CellBorders()
    margins: CellMargins = CellMargins()
    shading: Optional[str] = None
    column_span: int = 1


@dataclass
class Row:
    cells: List[Cell]


@dataclass
class Table:
    rows: List[Row]
    column_widths: List[int]

    @property
    def width(self) -> int:
        return sum(self.column_widths)


Block = Union[Paragraph, Table]


@dataclass(frozen=True)
class PageSetup:
    width: int = 11906
    height: int = 16838
    margin_top: int = 720
    margin_bottom: int = 720
    margin_left: int = 850
    margin_right: int = 850


@dataclass
class Section:
    blocks: List[Block] = field(default_factory=list)
    page: PageSetup = PageSetup()


@dataclass
class Document:
    sections: List[Section] = field(default_factory=list)
    title: str = ""

    def iter_paragraphs(self):
        """Yield every paragraph in reading order, descending into table cells."""
        for section in self.sections:
            for block in section.blocks:
                if isinstance(block, Table):
                    for row in block.rows:
                        for cell in row.cells:
                            yield from cell.blocks
                else:
                    yield block

    def plain_text(self) -> str:
        return "\n".join(p.text for p in self.iter_paragraphs())


__all__ = [
    "Alignment",
    "Border",
    "CellBorders",
    "CellMargins",
    "Run",
    "Paragraph",
    "Cell",
    "Row",
    "Table",
    "Block",
    "PageSetup",
    "Section",
    "Document",
]
